from __future__ import annotations

"""
Time sources for the governance ledger.

Every ledger transition accepts an explicit `now`; when a caller omits it the
ledger reads its clock instead. Timestamps are integer UNIX seconds.

- SystemClock: wall clock (`time.time()` truncated to seconds).
- ManualClock: deterministic clock for tests and scenario replay; it only
  moves when told to and never moves backwards.
"""


import time
from threading import Lock
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock that is advanced explicitly.

    Usage:
      clock = ManualClock(start=1_700_000_000)
      clock.advance(2001)
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start must be >= 0")
        self._now = int(start)
        self._lock = Lock()

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        with self._lock:
            self._now += int(seconds)
            return self._now

    def set(self, ts: int) -> int:
        with self._lock:
            if ts < self._now:
                raise ValueError(f"ManualClock cannot move backwards ({ts} < {self._now})")
            self._now = int(ts)
            return self._now


__all__ = ["Clock", "SystemClock", "ManualClock"]
