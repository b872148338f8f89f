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

"""Exception hierarchy for buildwatch.

This module defines a custom exception hierarchy that allows callers to
distinguish between the different ways a fetch or poll can fail:

- ConfigError: Configuration problems (bad settings, malformed request URLs)
- NetworkError: Transport problems (connection, timeout, HTTP status, body read)
- DataError: The API answered, but with data we cannot use
- BuildRegressionError: The API reports an older latest build than before

All exceptions inherit from BuildWatchError, so callers can catch every
buildwatch failure with a single except clause. Each class carries a
``retryable`` flag telling a scheduler whether trying again later can help.

Example:
    Deciding whether to retry:
        ```python
        from buildwatch.exceptions import BuildWatchError

        try:
            update = stream.poll()
        except BuildWatchError as e:
            if e.retryable:
                print(f"Will retry later: {e}")
            else:
                raise
        ```
"""

from __future__ import annotations

__all__ = [
    "BuildWatchError",
    "ConfigError",
    "UrlConstructionError",
    "NetworkError",
    "TransportError",
    "BodyReadError",
    "DataError",
    "SchemaMismatchError",
    "NoBuildsError",
    "BuildRegressionError",
]


class BuildWatchError(Exception):
    """Base exception for all buildwatch errors.

    Attributes:
        retryable: True if the same call may succeed later without anyone
            changing configuration or code.
    """

    retryable: bool = False


class ConfigError(BuildWatchError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Missing or unreadable configuration files
    - YAML parsing (syntax errors, invalid structure)
    - Invalid setting values (empty project, non-positive timeout)
    """


class UrlConstructionError(ConfigError):
    """Raised when a composed request URL is not a valid http(s) URL.

    Attributes:
        url: The URL that was rejected.
    """

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class NetworkError(BuildWatchError):
    """Raised for network-related errors. Transient by nature."""

    retryable = True


class TransportError(NetworkError):
    """Raised when a request fails to complete successfully.

    Covers connection failures, timeouts and non-2xx HTTP statuses.

    Attributes:
        url: The requested URL.
        status_code: HTTP status code for status failures, else None.
    """

    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class BodyReadError(NetworkError):
    """Raised when a response body could not be fully read."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class DataError(BuildWatchError):
    """Raised when the API returned data that cannot be used."""


class SchemaMismatchError(DataError):
    """Raised when a response body does not decode into the expected record.

    This usually means the API contract changed. Retrying will not help
    until someone looks at it.

    Attributes:
        body: Excerpt of the offending body, if available.
    """

    def __init__(self, message: str, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


class NoBuildsError(DataError):
    """Raised when a version exists but lists no builds.

    Retryable: a freshly created version line gets its first build later.

    Attributes:
        version: The version label that had no builds.
    """

    retryable = True

    def __init__(self, version: str) -> None:
        super().__init__(f"No builds for version {version!r}")
        self.version = version


class BuildRegressionError(BuildWatchError):
    """Raised when the latest build number went backwards.

    Seen when a load-balanced endpoint serves stale data or the server
    rolled a build back. The stream keeps the higher build number it saw
    before, so polling can simply continue.

    Attributes:
        version: The tracked version label.
        last_seen: Highest build number observed so far.
        latest: The lower build number just reported.
    """

    retryable = True

    def __init__(self, version: str, last_seen: int, latest: int) -> None:
        super().__init__(
            f"Latest build for version {version!r} went back from "
            f"{last_seen} to {latest}"
        )
        self.version = version
        self.last_seen = last_seen
        self.latest = latest
