"""
Wall-clock sources.

The pool never schedules anything: period boundaries are realised by the
next call that reads the clock. ``ManualClock`` lets tests and simulations
move time explicitly.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current unix timestamp in whole seconds."""

    def now(self) -> int: ...


class SystemClock:
    """Clock backed by ``time.time()``."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start must be non-negative")
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to *timestamp*. Moving backwards is not allowed."""
        if timestamp < self._now:
            raise ValueError(f"Cannot move clock backwards ({timestamp} < {self._now})")
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        """Move forward by *seconds* and return the new time."""
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        self._now += seconds
        return self._now
