"""Occurrence tracking for a single resolution pass."""

from __future__ import annotations

import bisect

from textanchor.models.document import CharInterval


class OccurrenceTracker:
    """Cursor plus claimed intervals for one document's resolution.

    Each matched span is claimed once, so repeated identical text in the
    source is handed out occurrence by occurrence instead of resolving every
    record to the first copy. Create one tracker per resolution call.
    """

    def __init__(self) -> None:
        """Start with the cursor at offset 0 and nothing claimed."""
        self.cursor = 0
        self._starts: list[int] = []
        self._claims: list[CharInterval] = []

    @property
    def claimed(self) -> list[CharInterval]:
        """Claimed intervals sorted by start offset."""
        return list(self._claims)

    def advance(self, interval: CharInterval) -> None:
        """Claim an interval and move the cursor to its end."""
        position = bisect.bisect_right(self._starts, interval.start)
        self._starts.insert(position, interval.start)
        self._claims.insert(position, interval)
        self.cursor = interval.end

    def is_claimed(self, start: int, end: int) -> bool:
        """Return True if ``[start, end)`` overlaps any claimed interval."""
        # Claims starting at or after `end` cannot overlap.
        limit = bisect.bisect_left(self._starts, end)
        return any(claim.overlaps(start, end) for claim in self._claims[:limit])
