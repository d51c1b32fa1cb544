# Copyright 2026 Pennyworth Technologies, Inc.
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

"""Ordered tap storage with stage/before constrained insertion.

The sequence is always kept in resolved dispatch order. A new tap is
placed by scanning the existing taps from the end toward the start:

- while any of the new tap's ``before`` names are still unconsumed, the
  scan keeps moving left, consuming each name as its tap is passed;
- once no before names remain, the scan stops at the first tap whose
  stage is <= the new tap's stage and the new tap goes right after it.

A before name that matches no registered tap is never consumed, so the
new tap ends up at the very front.
"""

from __future__ import annotations

import logging
from typing import Iterator

from taphook.hooks.base import Tap

logger = logging.getLogger(__name__)


class TapRegistry:
    """Holds the taps of one hook in resolved dispatch order."""

    def __init__(self):
        self._taps: list[Tap] = []

    def __len__(self) -> int:
        return len(self._taps)

    def __iter__(self) -> Iterator[Tap]:
        return iter(tuple(self._taps))

    @property
    def taps(self) -> tuple[Tap, ...]:
        """Snapshot of the taps in dispatch order."""
        return tuple(self._taps)

    def names(self) -> list[str]:
        return [tap.name for tap in self._taps]

    def insert(self, tap: Tap) -> int:
        """Insert a tap at its resolved position.

        Args:
            tap: Tap record to insert

        Returns:
            Index the tap was placed at.
        """
        index = self._resolve_index(tap)
        self._taps.insert(index, tap)
        logger.debug(
            "Inserted tap '%s' (%s, stage=%s) at position %d of %d",
            tap.name, tap.type.value, tap.stage, index, len(self._taps),
        )
        return index

    def _resolve_index(self, tap: Tap) -> int:
        remaining = set(tap.before)
        i = len(self._taps)
        while i > 0:
            i -= 1
            existing = self._taps[i]
            if remaining:
                # Keep moving left until every before name has been passed.
                remaining.discard(existing.name)
                continue
            if existing.stage > tap.stage:
                continue
            i += 1
            break

        if remaining:
            logger.warning(
                "Tap '%s' references unregistered tap(s) %s in before; placing it first",
                tap.name, ", ".join(sorted(map(str, remaining))),
            )
        return i
