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

"""Caller-side orchestration for buildwatch.

Streams decide whether an update happened; this module is the thin caller
around them. It builds one stream per tracked version and polls a set of
streams once, turning each stream's outcome (including errors) into a
PollOutcome and logging it. Whoever owns the schedule calls poll_streams()
whenever it sees fit and keeps the streams alive between calls.

Example:
    ```python
    from buildwatch.config import create_api, load_settings
    from buildwatch.core import build_streams, poll_streams

    settings = load_settings()
    api = create_api(settings)
    streams = build_streams(api, settings.versions)

    # on every tick of your scheduler:
    for outcome in poll_streams(streams, api=api, fetch_builds=True):
        if outcome.status == "updated":
            print(f"{outcome.version}: build {outcome.build.build}")
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from buildwatch.api.client import DistributionApi
from buildwatch.exceptions import BuildWatchError, ConfigError
from buildwatch.logging import Logger, get_global_logger
from buildwatch.results import PollOutcome
from buildwatch.stream.builds import BuildNumberStream, VersionSource


def build_streams(
    api: VersionSource, versions: Iterable[str]
) -> dict[str, BuildNumberStream]:
    """Create one unseeded BuildNumberStream per version label.

    Args:
        api: Client shared by all streams.
        versions: Version labels to track. Duplicates are collapsed and
            the first-seen order is kept.

    Returns:
        Streams keyed by version label.

    Raises:
        ConfigError: If no versions were given.
    """
    streams: dict[str, BuildNumberStream] = {}
    for version in versions:
        if version not in streams:
            streams[version] = BuildNumberStream(api, version)
    if not streams:
        raise ConfigError(
            "No versions to track. Set 'versions' in the settings file "
            "or BUILDWATCH_VERSIONS."
        )
    return streams


def poll_streams(
    streams: Mapping[str, BuildNumberStream],
    *,
    api: DistributionApi | None = None,
    fetch_builds: bool = False,
    logger: Logger | None = None,
) -> list[PollOutcome]:
    """Poll every stream once.

    A failing stream never stops the others: its BuildWatchError is
    recorded on its outcome and logged as a warning. Streams are polled
    sequentially, in mapping order.

    Args:
        streams: Streams keyed by a caller-chosen label, usually the
            version label (see build_streams()). Keys only name outcomes;
            requests always use each stream's own version.
        api: Client for the follow-up build fetch. Required when
            fetch_builds is True.
        fetch_builds: If True, fetch the full Build record for every
            version that reported an update.
        logger: Logger to use. Defaults to the global logger.

    Returns:
        One PollOutcome per stream, in mapping order.

    Raises:
        ConfigError: If fetch_builds is True but no api was given.
    """
    if fetch_builds and api is None:
        raise ConfigError("poll_streams(fetch_builds=True) needs an api client")
    if logger is None:
        logger = get_global_logger()

    outcomes: list[PollOutcome] = []
    for label, stream in streams.items():
        was_seeded = stream.is_seeded
        try:
            update = stream.poll()
        except BuildWatchError as err:
            logger.warning("POLL", f"{label}: {err}")
            outcomes.append(
                PollOutcome(
                    version=label,
                    status="error",
                    last_seen_build=stream.last_seen_build,
                    error=err,
                )
            )
            continue

        if update is None:
            status = "unchanged" if was_seeded else "baseline"
            logger.verbose("POLL", f"{label}: {status} at build {stream.last_seen_build}")
            outcomes.append(
                PollOutcome(
                    version=label, status=status, last_seen_build=stream.last_seen_build
                )
            )
            continue

        logger.verbose("POLL", f"{label}: new build {stream.last_seen_build}")
        build = None
        follow_up_error = None
        if fetch_builds:
            try:
                build = api.fetch_build(stream.version, stream.last_seen_build)
            except BuildWatchError as err:
                logger.warning("POLL", f"{label}: could not fetch build details: {err}")
                follow_up_error = err

        outcomes.append(
            PollOutcome(
                version=label,
                status="updated",
                last_seen_build=stream.last_seen_build,
                update=update,
                build=build,
                error=follow_up_error,
            )
        )

    return outcomes
