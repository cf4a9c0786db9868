"""
Time sources for the site stress system.

Every component that compares against the deadline or measures downtime
takes a Clock, so runs can be driven by a manual clock in tests.
"""

import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of monotonic and wall-clock time."""

    def monotonic(self) -> float:
        """Seconds on a monotonic scale, used for deadlines and durations."""
        ...

    def now(self) -> datetime:
        """Current wall-clock time, used for timestamps shown to the operator."""
        ...


class SystemClock:
    """Clock backed by the interpreter's real time sources."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone()


class ManualClock:
    """
    Clock that only moves when told to.

    Wall-clock time is derived from a fixed origin plus the monotonic offset,
    so both scales always agree.
    """

    def __init__(
        self,
        start: float = 0.0,
        origin: Optional[datetime] = None,
    ) -> None:
        self._start = start
        self._current = start
        self._origin = origin or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def monotonic(self) -> float:
        with self._lock:
            return self._current

    def now(self) -> datetime:
        with self._lock:
            elapsed = self._current - self._start
        return self._origin + timedelta(seconds=elapsed)

    def advance(self, seconds: float) -> float:
        """Move the clock forward and return the new monotonic value."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        with self._lock:
            self._current += seconds
            return self._current

    def set(self, value: float) -> None:
        """Jump to an absolute monotonic value (never backwards)."""
        with self._lock:
            if value < self._current:
                raise ValueError("ManualClock cannot move backwards")
            self._current = value
