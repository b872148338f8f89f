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

"""Public API return types for buildwatch.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Note:
    Only public API return types belong in this module. API records
    (Version, Build) stay in buildwatch.api.models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from buildwatch.api.models import Build, Version
from buildwatch.exceptions import BuildWatchError

PollStatus = Literal["baseline", "unchanged", "updated", "error"]


@dataclass(frozen=True)
class PollOutcome:
    """Result of polling one stream once.

    Attributes:
        version: Version label the stream watches.
        status: "baseline" (first successful poll), "unchanged",
            "updated" (new build seen) or "error".
        last_seen_build: The stream's baseline after the poll.
        update: Version record emitted by the stream, when updated.
        build: Full record of the newest build, when updated and the
            caller asked for it.
        error: The error raised by the poll or by the follow-up build
            fetch. A follow-up failure keeps status "updated".
    """

    version: str
    status: PollStatus
    last_seen_build: int | None
    update: Version | None = None
    build: Build | None = None
    error: BuildWatchError | None = None

    @property
    def retryable(self) -> bool:
        """True if the error, if any, is worth retrying later."""
        return self.error is None or self.error.retryable
