# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""HTTP client for the versioned-software distribution API.

Talks to the v2 "bibliothek" API used by PaperMC and compatible servers.
Three read-only resources are exposed:

- ``GET {api_base}/v2/projects/{project}``
- ``GET {api_base}/v2/projects/{project}/versions/{version}``
- ``GET {api_base}/v2/projects/{project}/versions/{version}/builds/{build}``

Every request sends ``Accept: application/json`` and the configured
User-Agent. Responses are decoded into the records from
``buildwatch.api.models``.

Error Handling:

- UrlConstructionError: The composed URL is not a valid http(s) URL
- TransportError: Connection failure, timeout, or non-2xx status
- BodyReadError: The response body could not be read
- SchemaMismatchError: The body is not JSON or not the expected shape
- Errors are chained with 'from err' for better debugging

The client never retries. Every call is idempotent, so callers may retry
whatever they like.

Example:
    Fetch the newest build of a version:
        ```python
        from buildwatch.api import DistributionApi

        with DistributionApi("https://papermc.io/api", "paper") as api:
            build = api.fetch_latest_build("1.16.5")
            print(build.build, build.downloads["application"].name)
        ```

    Share one session between clients:
        ```python
        import requests

        session = requests.Session()
        paper = DistributionApi("https://papermc.io/api", "paper", session=session)
        velocity = DistributionApi("https://papermc.io/api", "velocity", session=session)
        ```
"""

from __future__ import annotations

import json
import math
from typing import Any, TypeVar
from urllib.parse import quote, urlsplit

import requests

from buildwatch import __version__
from buildwatch.exceptions import (
    BodyReadError,
    ConfigError,
    NoBuildsError,
    SchemaMismatchError,
    TransportError,
    UrlConstructionError,
)
from buildwatch.logging import get_global_logger

from .models import Build, Project, Version

ACCEPT_JSON = "application/json"
DEFAULT_USER_AGENT = f"buildwatch/{__version__} automated-bot"
DEFAULT_TIMEOUT = 30.0

# How much of a bad body to keep on SchemaMismatchError
_BODY_EXCERPT = 200

RecordT = TypeVar("RecordT", Project, Version, Build)


class DistributionApi:
    """Client for one project on a distribution API.

    Attributes:
        api_base: API root without trailing slash.
        project: Project identifier (e.g., "paper").
        timeout: Per-request timeout in seconds.
        session: The requests session used for all calls.

    Example:
        Basic usage:
            ```python
            api = DistributionApi("https://papermc.io/api", "paper")
            version = api.fetch_version("1.16.5")
            version.latest_build_number  # 466
            ```
    """

    def __init__(
        self,
        api_base: str,
        project: str,
        *,
        session: requests.Session | None = None,
        user_agent: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Create a client.

        Args:
            api_base: API root, e.g. "https://papermc.io/api".
            project: Project identifier. Must be non-empty.
            session: Session to send requests with. If omitted the client
                creates and owns one, and close() will close it.
            user_agent: User-Agent header value. Defaults to
                "buildwatch/<version> automated-bot".
            timeout: Per-request timeout in seconds. Default is 30.

        Raises:
            ConfigError: If project is empty or timeout is not a positive,
                finite number.
        """
        if not project or not project.strip():
            raise ConfigError("DistributionApi requires a non-empty project")
        if isinstance(timeout, bool) or not math.isfinite(timeout) or timeout <= 0:
            raise ConfigError(f"Timeout must be positive and finite, got {timeout!r}")

        self.api_base = api_base.rstrip("/")
        self.project = project
        self.timeout = timeout

        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self._headers = {
            "Accept": ACCEPT_JSON,
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
        }

    # -------------------------------
    # Lifecycle
    # -------------------------------

    def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> DistributionApi:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DistributionApi(api_base={self.api_base!r}, project={self.project!r})"

    # -------------------------------
    # Public API
    # -------------------------------

    def fetch_project(self) -> Project:
        """Fetch the project record (version groups and versions).

        Raises:
            UrlConstructionError: If the API base is not a valid URL.
            TransportError: On connection failure, timeout or bad status.
            BodyReadError: If the body cannot be read.
            SchemaMismatchError: If the body is not a project record.
        """
        url = self._url("v2", "projects", self.project)
        return self._get(url, Project)

    def fetch_version(self, version: str) -> Version:
        """Fetch one version record (its build numbers).

        Args:
            version: Version label, e.g. "1.16.5". An unknown label
                surfaces as a TransportError with status_code 404.

        Raises:
            UrlConstructionError: If the version label is empty or the API
                base is not a valid URL.
            TransportError: On connection failure, timeout or bad status.
            BodyReadError: If the body cannot be read.
            SchemaMismatchError: If the body is not a version record.
        """
        url = self._url("v2", "projects", self.project, "versions", version)
        return self._get(url, Version)

    def fetch_build(self, version: str, build: int) -> Build:
        """Fetch the full record of one build.

        Args:
            version: Version label, e.g. "1.16.5".
            build: Build number, e.g. 466.

        Raises:
            UrlConstructionError: If the version label is empty or the API
                base is not a valid URL.
            TransportError: On connection failure, timeout or bad status.
            BodyReadError: If the body cannot be read.
            SchemaMismatchError: If the body is not a build record.
        """
        url = self._url(
            "v2", "projects", self.project, "versions", version, "builds", str(build)
        )
        return self._get(url, Build)

    def fetch_latest_build(self, version: str) -> Build:
        """Fetch the newest build of a version.

        Two requests: the version record, then the build it lists last.

        Raises:
            NoBuildsError: If the version lists no builds.
            (plus everything fetch_version and fetch_build raise)
        """
        latest = self.fetch_version(version).latest_build_number
        if latest is None:
            raise NoBuildsError(version)
        return self.fetch_build(version, latest)

    # -------------------------------
    # Internals
    # -------------------------------

    def _url(self, *segments: str) -> str:
        """Compose and validate a request URL from path segments."""
        url = f"{self.api_base}/" + "/".join(quote(s, safe="") for s in segments)

        if any(not s for s in segments):
            raise UrlConstructionError(f"Empty path segment in URL {url!r}", url)

        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise UrlConstructionError(
                f"Cannot build request URL {url!r}: API base must be an "
                f"absolute http(s) URL",
                url,
            )
        return url

    def _get(self, url: str, record: type[RecordT]) -> RecordT:
        """GET a URL and decode the JSON body into a record."""
        logger = get_global_logger()
        logger.debug("HTTP", f"GET {url}")

        try:
            response = self.session.get(
                url, headers=self._headers, timeout=self.timeout, stream=True
            )
        except requests.exceptions.Timeout as err:
            raise TransportError(f"Request to {url} timed out", url) from err
        except requests.exceptions.RequestException as err:
            raise TransportError(f"Request to {url} failed: {err}", url) from err

        with response:
            logger.debug("HTTP", f"{response.status_code} {response.reason} <- {url}")
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as err:
                raise TransportError(
                    f"Request to {url} failed: {response.status_code} "
                    f"{response.reason}",
                    url,
                    status_code=response.status_code,
                ) from err

            try:
                body = response.text
            except requests.exceptions.RequestException as err:
                raise BodyReadError(
                    f"Could not read response body from {url}: {err}", url
                ) from err

        return _decode(body, record)


def _decode(body: str, record: type[RecordT]) -> RecordT:
    try:
        data: Any = json.loads(body)
    except json.JSONDecodeError as err:
        raise SchemaMismatchError(
            f"Invalid JSON in response: {err}. Body: {body[:_BODY_EXCERPT]}",
            body=body[:_BODY_EXCERPT],
        ) from err

    try:
        return record.from_json(data)
    except SchemaMismatchError as err:
        raise SchemaMismatchError(
            f"{err}. Body: {body[:_BODY_EXCERPT]}", body=body[:_BODY_EXCERPT]
        ) from err
