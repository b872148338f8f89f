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

"""Update stream protocol for buildwatch.

An update stream turns repeated fetches of a remote source into
at-most-once change notifications. Each data source (build numbers today,
maybe a commit feed later) implements the same small contract:

    poll() -> Item | None

- Each call performs exactly one fetch cycle.
- None means nothing new. The very first call always returns None: it
  records a baseline, since a change needs two observations.
- An item is returned exactly once per distinct new item.
- A BuildWatchError is raised when the fetch or the comparison cannot be
  completed. The stream's state is left exactly as it was, so the next
  call behaves as if the failed one never happened.

Design Philosophy:
    - UpdateStream is a Protocol (structural subtyping, not inheritance)
    - Each source keeps its state private to its own class
    - Streams do not schedule, retry or log; callers do

Concurrency:
    poll() reads and then writes stream state without locking. Callers
    must keep at most one poll() in flight per stream. Different streams
    share nothing and may be polled in any order.

Example:
    Implementing a custom stream:
        ```python
        from buildwatch.stream.base import UpdateStream

        class CounterStream:
            def __init__(self, read):
                self._read = read
                self._last = None

            def poll(self) -> int | None:
                value = self._read()
                if self._last is None:
                    self._last = value
                    return None
                if value > self._last:
                    self._last = value
                    return value
                return None

        stream: UpdateStream[int] = CounterStream(lambda: 1)
        ```
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

ItemT_co = TypeVar("ItemT_co", covariant=True)


@runtime_checkable
class UpdateStream(Protocol[ItemT_co]):
    """Protocol for polling sources that report each new item once."""

    def poll(self) -> ItemT_co | None:
        """Check the source once for a new item.

        Returns:
            The new item if one appeared since the last successful poll,
                otherwise None (always None on the first call).

        Raises:
            BuildWatchError: If the fetch or comparison failed. State is
                unchanged when this happens.
        """
        ...
