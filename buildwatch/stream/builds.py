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

"""Build-number update stream.

Watches one version line of a project and reports when its newest build
number increases. The only state kept between polls is the highest build
number seen so far.

State machine:

- Unseeded: no successful poll yet. The next successful poll records the
  latest build as the baseline and returns None.
- Seeded(n): a higher build m > n moves to Seeded(m) and returns the
  Version record; m == n returns None; m < n raises BuildRegressionError
  and stays at Seeded(n).

Example:
    ```python
    from buildwatch.api import DistributionApi
    from buildwatch.stream import BuildNumberStream

    stream = BuildNumberStream(DistributionApi("https://papermc.io/api", "paper"), "1.16.5")
    stream.poll()               # None, baseline recorded
    update = stream.poll()      # Version record once a new build lands
    ```
"""

from __future__ import annotations

from typing import Protocol

from buildwatch.api.models import Version
from buildwatch.exceptions import BuildRegressionError, NoBuildsError


class VersionSource(Protocol):
    """Anything that can fetch a Version record (DistributionApi does)."""

    def fetch_version(self, version: str) -> Version: ...


class BuildNumberStream:
    """Update stream over the build numbers of one version.

    Implements UpdateStream[Version].

    Attributes:
        api: Source of Version records.
    """

    def __init__(self, api: VersionSource, version: str) -> None:
        """Create an unseeded stream.

        Args:
            api: Client used to fetch the version record on each poll.
            version: Version label to watch, e.g. "1.16.5".
        """
        self.api = api
        self._version = version
        self._last_seen_build: int | None = None

    @property
    def version(self) -> str:
        """Version label this stream watches."""
        return self._version

    @property
    def last_seen_build(self) -> int | None:
        """Highest build number observed, or None before the first poll."""
        return self._last_seen_build

    @property
    def is_seeded(self) -> bool:
        return self._last_seen_build is not None

    def reset(self) -> None:
        """Forget the baseline; the next poll records a new one."""
        self._last_seen_build = None

    def poll(self) -> Version | None:
        """Fetch the version once and report a new build, if any.

        Returns:
            The fetched Version record when its latest build number is
                higher than any seen before; None on the first poll and
                when nothing changed.

        Raises:
            NoBuildsError: If the version lists no builds.
            BuildRegressionError: If the latest build is lower than the
                highest one seen. The stream keeps the higher number.
            BuildWatchError: Any fetch error from the client, unchanged.
        """
        record = self.api.fetch_version(self._version)

        latest = record.latest_build_number
        if latest is None:
            raise NoBuildsError(self._version)

        last_seen = self._last_seen_build
        if last_seen is None:
            self._last_seen_build = latest
            return None
        if latest > last_seen:
            self._last_seen_build = latest
            return record
        if latest < last_seen:
            raise BuildRegressionError(self._version, last_seen, latest)
        return None

    def __repr__(self) -> str:
        return (
            f"BuildNumberStream(version={self._version!r}, "
            f"last_seen_build={self._last_seen_build!r})"
        )
