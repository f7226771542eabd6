"""
Bounded window of recently ingested events.

Used by the network detector to approximate short-term rates. The window is
limited both by count and by age:

    len(window) <= max_count
    now - event.occurred_at <= max_age   for every buffered event

"now" is the latest event time seen by the window, unless a clock is supplied.
Eviction runs eagerly on push and again lazily on every read, so the
invariant holds whenever the window is queried.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Callable, Deque, List, Optional, Tuple

from src.data.schema import Event

logger = logging.getLogger(__name__)

EventPredicate = Callable[[Event], bool]


def as_utc(ts: datetime) -> datetime:
    """Normalize a timestamp to an aware UTC datetime (naive values are taken as UTC)."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class EventWindow:
    """
    Count- and age-bounded buffer of events in insertion order.

    Oldest entries sit at the left and are evicted first. Not thread-safe;
    the engine serializes access.

    Example:
        >>> window = EventWindow(max_count=100, max_age=timedelta(seconds=60))
        >>> window.push(event)
        >>> window.count_matching(lambda e: e.category == "network", timedelta(seconds=60))
    """

    def __init__(
        self,
        max_count: int,
        max_age: timedelta,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if max_count < 1:
            raise ValueError("max_count must be at least 1")
        if max_age <= timedelta(0):
            raise ValueError("max_age must be positive")

        self.max_count = max_count
        self.max_age = max_age
        self._clock = clock
        self._buf: Deque[Tuple[datetime, Event]] = deque()
        self._latest: Optional[datetime] = None
        # False once an out-of-order event has been pushed
        self._ordered = True

    def now(self) -> Optional[datetime]:
        """Reference time for age checks."""
        if self._clock is not None:
            return as_utc(self._clock())
        return self._latest

    def push(self, event: Event) -> None:
        """Append an event, then evict everything violating the age or count bound."""
        ts = as_utc(event.occurred_at)

        if self._buf and ts < self._buf[-1][0]:
            self._ordered = False
        if self._latest is None or ts > self._latest:
            self._latest = ts

        self._buf.append((ts, event))
        while len(self._buf) > self.max_count:
            self._buf.popleft()

        self._evict()

    def count_matching(self, predicate: EventPredicate, since: timedelta) -> int:
        """
        Count buffered events satisfying ``predicate`` that occurred strictly
        less than ``since`` before the reference time.
        """
        self._evict()
        now = self.now()
        if now is None:
            return 0
        return sum(1 for ts, event in self._buf if now - ts < since and predicate(event))

    def snapshot(self) -> List[Event]:
        """Copy of the buffered events, oldest first."""
        self._evict()
        return [event for _, event in self._buf]

    def __len__(self) -> int:
        self._evict()
        return len(self._buf)

    def _evict(self) -> None:
        now = self.now()
        if now is None:
            return

        cutoff = now - self.max_age
        before = len(self._buf)

        while self._buf and self._buf[0][0] < cutoff:
            self._buf.popleft()

        if not self._ordered:
            if any(ts < cutoff for ts, _ in self._buf):
                self._buf = deque(item for item in self._buf if item[0] >= cutoff)
            if all(self._buf[i][0] <= self._buf[i + 1][0] for i in range(len(self._buf) - 1)):
                self._ordered = True

        evicted = before - len(self._buf)
        if evicted:
            logger.debug(f"Evicted {evicted} expired events from window")
