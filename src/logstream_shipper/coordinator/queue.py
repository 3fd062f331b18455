from __future__ import annotations

from collections import deque
from typing import Iterable, Iterator

from .types import LogEvent


class EventQueue:
    """Unbounded FIFO of log events awaiting delivery.

    Only four mutations exist: append at the tail, take a prefix from the
    head, push a prefix back onto the head, and detach everything. Relative
    order of events is never changed.
    """

    def __init__(self, events: Iterable[LogEvent] = ()):
        self._events: deque[LogEvent] = deque(events)

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(self._events)

    def append(self, event: LogEvent) -> None:
        self._events.append(event)

    def take(self, count: int) -> list[LogEvent]:
        """Remove and return the first ``count`` events."""
        if count >= len(self._events):
            return self.detach()
        return [self._events.popleft() for _ in range(count)]

    def push_front(self, events: Iterable[LogEvent]) -> None:
        """Insert events at the head, ahead of anything already queued."""
        self._events.extendleft(reversed(list(events)))

    def detach(self) -> list[LogEvent]:
        """Replace the queue with an empty one and return the old contents."""
        old, self._events = self._events, deque()
        return list(old)
