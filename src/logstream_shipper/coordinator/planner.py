"""
Batch planner for ordered-append log destinations.

The destination caps each append at a number of events and a number of bytes,
where every event costs its message size plus a fixed 26 byte overhead.
"""

from __future__ import annotations

from typing import Iterable

from .types import LogEvent, MessageSizer

EVENT_OVERHEAD_BYTES = 26

MAX_BATCH_COUNT = 10_000
MIN_BATCH_SIZE = 256
MAX_BATCH_SIZE = 1_048_576


def char_count(message: str) -> int:
    """Default size measurement: number of code points.

    Undercounts multi-byte text ("I ❤ AWS" is 7 characters but 9 bytes).
    Use utf8_size or lower max_bytes when messages are not plain ASCII.
    """
    return len(message)


def utf8_size(message: str) -> int:
    """Exact UTF-8 encoded size of the message."""
    return len(message.encode("utf-8"))


class BatchPlanner:
    """Picks the largest queue prefix that fits in one append call."""

    def __init__(
        self,
        max_count: int = MAX_BATCH_COUNT,
        max_bytes: int = MAX_BATCH_SIZE,
        *,
        measure: MessageSizer = char_count,
    ):
        if not 1 <= max_count <= MAX_BATCH_COUNT:
            raise ValueError(f"max_count must be between 1 and {MAX_BATCH_COUNT}")
        if not MIN_BATCH_SIZE <= max_bytes <= MAX_BATCH_SIZE:
            raise ValueError(f"max_bytes must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}")

        self.max_count = max_count
        self.max_bytes = max_bytes
        self._measure = measure

    def event_cost(self, event: LogEvent) -> int:
        return EVENT_OVERHEAD_BYTES + self._measure(event.message)

    def next_batch_size(self, events: Iterable[LogEvent]) -> int:
        """Number of events from the head of ``events`` to send next.

        Never 0 for a non-empty sequence: an event whose own cost exceeds
        max_bytes is sent alone.
        """
        count = 0
        total = 0
        for event in events:
            if count >= self.max_count:
                break
            total += self.event_cost(event)
            if count and total > self.max_bytes:
                break
            count += 1
        return count
