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

"""Records returned by the distribution API.

Every record is a frozen dataclass built from decoded JSON through its
``from_json`` classmethod. Parsing is strict about the fields we rely on
and ignores everything else the API sends (project_name, etc.), so extra
fields never break us but a missing or mistyped field raises
SchemaMismatchError.

Example:
    Parse a version response:
        ```python
        from buildwatch.api.models import Version

        version = Version.from_json({"version": "1.16.5", "builds": [465, 466]})
        version.latest_build_number  # 466
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
import re
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

from buildwatch.exceptions import SchemaMismatchError

_SHA256_RE = re.compile(r"^[0-9a-fA-F]{64}$")

# ----------------------------
# Field helpers
# ----------------------------


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SchemaMismatchError(
            f"Expected a JSON object for {what}, got {type(data).__name__}"
        )
    return data


def _field(data: dict[str, Any], key: str, what: str) -> Any:
    try:
        return data[key]
    except KeyError as err:
        raise SchemaMismatchError(f"{what} is missing field {key!r}") from err


def _str_field(data: dict[str, Any], key: str, what: str) -> str:
    value = _field(data, key, what)
    if not isinstance(value, str):
        raise SchemaMismatchError(
            f"{what}.{key} must be a string, got {type(value).__name__}"
        )
    return value


def _int_field(data: dict[str, Any], key: str, what: str) -> int:
    value = _field(data, key, what)
    # bool is an int subclass; JSON true is not a build number
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaMismatchError(
            f"{what}.{key} must be an integer, got {type(value).__name__}"
        )
    return value


def _str_list_field(data: dict[str, Any], key: str, what: str) -> tuple[str, ...]:
    value = _field(data, key, what)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaMismatchError(f"{what}.{key} must be a list of strings")
    return tuple(value)


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _parse_time(value: Any, what: str) -> datetime:
    if not isinstance(value, str):
        raise SchemaMismatchError(f"{what}.time must be an ISO-8601 string")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as err:
        raise SchemaMismatchError(
            f"{what}.time is not a valid ISO-8601 datetime: {value!r}"
        ) from err
    if parsed.tzinfo is None:
        raise SchemaMismatchError(f"{what}.time has no timezone: {value!r}")
    return parsed


# ----------------------------
# Records
# ----------------------------


@dataclass(frozen=True)
class Project:
    """A trackable software project.

    Attributes:
        version_groups: Version group labels, oldest first (e.g., "1.16").
        versions: Version labels, oldest first (e.g., "1.16.5").
        project_id: Project identifier echoed by the API, if sent.
        project_name: Display name echoed by the API, if sent.
    """

    version_groups: tuple[str, ...]
    versions: tuple[str, ...]
    project_id: str | None = None
    project_name: str | None = None

    @property
    def latest_version(self) -> str | None:
        """Newest version label, or None if the project has none yet."""
        return self.versions[-1] if self.versions else None

    @classmethod
    def from_json(cls, data: Any) -> Project:
        data = _require_mapping(data, "project")
        return cls(
            version_groups=_str_list_field(data, "version_groups", "project"),
            versions=_str_list_field(data, "versions", "project"),
            project_id=_optional_str(data, "project_id"),
            project_name=_optional_str(data, "project_name"),
        )


@dataclass(frozen=True)
class Version:
    """One version line of a project.

    The server appends builds in ascending order, so the last entry is the
    newest. An empty ``builds`` tuple parses fine but is not something a
    stream can baseline against; ``latest_build_number`` returns None for
    it and callers must decide what that means.

    Attributes:
        builds: Build numbers, ascending.
        version: Version label echoed by the API, if sent.
    """

    builds: tuple[int, ...]
    version: str | None = None

    @property
    def latest_build_number(self) -> int | None:
        """Newest build number, or None if the version has no builds."""
        return self.builds[-1] if self.builds else None

    @classmethod
    def from_json(cls, data: Any) -> Version:
        data = _require_mapping(data, "version")
        builds = _field(data, "builds", "version")
        if not isinstance(builds, list) or any(
            isinstance(b, bool) or not isinstance(b, int) for b in builds
        ):
            raise SchemaMismatchError("version.builds must be a list of integers")
        return cls(builds=tuple(builds), version=_optional_str(data, "version"))


@dataclass(frozen=True)
class Change:
    """A commit included in a build."""

    commit: str
    summary: str
    message: str

    @classmethod
    def from_json(cls, data: Any) -> Change:
        data = _require_mapping(data, "change")
        return cls(
            commit=_str_field(data, "commit", "change"),
            summary=_str_field(data, "summary", "change"),
            message=_str_field(data, "message", "change"),
        )


@dataclass(frozen=True)
class Download:
    """A downloadable artifact of a build.

    Attributes:
        name: File name (e.g., "paper-1.16.5-466.jar").
        sha256: Lowercase or uppercase hex SHA-256 of the file (64 chars).
    """

    name: str
    sha256: str

    @classmethod
    def from_json(cls, data: Any) -> Download:
        data = _require_mapping(data, "download")
        name = _str_field(data, "name", "download")
        sha256 = _str_field(data, "sha256", "download")
        if not _SHA256_RE.match(sha256):
            raise SchemaMismatchError(
                f"download.sha256 for {name!r} is not a 64-character hex digest"
            )
        return cls(name=name, sha256=sha256)


@dataclass(frozen=True)
class Build:
    """One concrete, immutable build of a version.

    Attributes:
        build: Build number.
        time: When the build was produced (timezone aware).
        changes: Commits in this build, in API order.
        downloads: Artifact key (e.g., "application") to download info.
    """

    build: int
    time: datetime
    changes: tuple[Change, ...] = ()
    downloads: Mapping[str, Download] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view; a frozen record must not expose a mutable dict
        object.__setattr__(self, "downloads", MappingProxyType(dict(self.downloads)))

    def __hash__(self) -> int:
        return hash(
            (self.build, self.time, self.changes, frozenset(self.downloads.items()))
        )

    def download_url(
        self,
        api_base: str,
        project: str,
        version: str,
        artifact: str = "application",
    ) -> str:
        """Compose the URL serving one of this build's artifacts.

        Args:
            api_base: API root, e.g. "https://papermc.io/api".
            project: Project identifier.
            version: Version label this build belongs to.
            artifact: Key in ``downloads``. Default is "application".

        Returns:
            Absolute download URL.

        Raises:
            KeyError: If the build has no such artifact.
        """
        download = self.downloads[artifact]
        segments = [
            "v2",
            "projects",
            project,
            "versions",
            version,
            "builds",
            str(self.build),
            "downloads",
            download.name,
        ]
        path = "/".join(quote(s, safe="") for s in segments)
        return f"{api_base.rstrip('/')}/{path}"

    @classmethod
    def from_json(cls, data: Any) -> Build:
        data = _require_mapping(data, "build")

        raw_changes = _field(data, "changes", "build")
        if not isinstance(raw_changes, list):
            raise SchemaMismatchError("build.changes must be a list")

        raw_downloads = _field(data, "downloads", "build")
        if not isinstance(raw_downloads, dict):
            raise SchemaMismatchError("build.downloads must be an object")

        return cls(
            build=_int_field(data, "build", "build"),
            time=_parse_time(_field(data, "time", "build"), "build"),
            changes=tuple(Change.from_json(c) for c in raw_changes),
            downloads={
                str(key): Download.from_json(value)
                for key, value in raw_downloads.items()
            },
        )
