"""Millisecond clocks used for TTL bookkeeping."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything returning a monotonic reading in milliseconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """Process-local monotonic clock backed by ``time.monotonic_ns``."""

    def now(self) -> float:
        return time.monotonic_ns() / 1_000_000


class ManualClock:
    """Clock that only moves when told to.

    Lets TTL behaviour be exercised without real waiting:

        clock = ManualClock()
        cache = ExpiringCache(clock=clock)
        cache.set("k", "v", ttl_ms=100)
        clock.advance(101)
        assert not cache.get("k")
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, milliseconds: float) -> float:
        """Move the clock forward and return the new reading."""
        if milliseconds < 0:
            raise ValueError("ManualClock cannot move backwards.")
        self._now += milliseconds
        return self._now
