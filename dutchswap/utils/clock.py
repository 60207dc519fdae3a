"""
Clocks for the auction engine.

The registry takes any zero-argument callable returning whole seconds.
ManualClock is a controllable one: it only moves when told to, which is
how the demo and the tests step through an auction's decay.
"""

import threading
import time
from typing import Optional


class ManualClock:
    """A clock that advances only on request."""

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else start
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        """Move forward and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot move clock backwards by {seconds}s")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, timestamp: int) -> None:
        with self._lock:
            self._now = timestamp

    def __repr__(self) -> str:
        return f"ManualClock(now={self()})"
