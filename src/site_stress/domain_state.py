"""
Per-domain shared state and availability detection.

One DomainState is shared by every worker of a domain. It owns two kinds of
synchronization and keeps both private:

- request counters, each behind its own small lock, so counting never waits
  on edge detection;
- the availability flag, down-since timestamp and transition log, behind a
  single per-domain lock that serializes edge detection.

Edges are detected with a cheap unlocked peek followed by a re-check under
the lock, so concurrent workers observing the same edge record it once.
"""

import threading
from typing import Optional

from .classifier import RequestOutcome
from .clock import Clock, SystemClock
from .enums import Availability, TransitionKind
from .models import Domain, DomainSnapshot, TransitionEvent


class AtomicCounter:
    """Monotonically increasing integer that is safe to bump from any thread."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


class DomainState:
    """Counters, availability flag and transition log for one domain."""

    def __init__(self, domain: Domain, clock: Optional[Clock] = None) -> None:
        self._domain = domain
        self._clock = clock or SystemClock()
        self._total = AtomicCounter()
        self._success = AtomicCounter()
        self._failure = AtomicCounter()
        self._lock = threading.Lock()
        self._down = False
        self._down_since: Optional[float] = None
        self._transitions: list[TransitionEvent] = []

    @property
    def domain(self) -> Domain:
        return self._domain

    def record_outcome(self, outcome: RequestOutcome) -> Optional[TransitionEvent]:
        """
        Count one classified request and run the edge check.

        Returns:
            The transition recorded by this call, or None when no edge fired
        """
        self._total.increment()
        if outcome.failed:
            self._failure.increment()
            if not self._down:
                return self._mark_down(outcome.describe())
        else:
            self._success.increment()
            if self._down:
                return self._mark_up()
        return None

    def _mark_down(self, reason: str) -> Optional[TransitionEvent]:
        with self._lock:
            if self._down:
                return None
            self._down = True
            self._down_since = self._clock.monotonic()
            event = TransitionEvent(
                domain=self._domain.name,
                kind=TransitionKind.DOWN,
                occurred_at=self._clock.now(),
                reason=reason,
            )
            self._transitions.append(event)
            return event

    def _mark_up(self) -> Optional[TransitionEvent]:
        with self._lock:
            if not self._down:
                return None
            downtime = self._clock.monotonic() - self._down_since
            self._down = False
            self._down_since = None
            event = TransitionEvent(
                domain=self._domain.name,
                kind=TransitionKind.UP,
                occurred_at=self._clock.now(),
                downtime_seconds=downtime,
            )
            self._transitions.append(event)
            return event

    def is_down(self) -> bool:
        """Read the availability flag under the transition lock."""
        with self._lock:
            return self._down

    def availability(self) -> Availability:
        return Availability.DOWN if self.is_down() else Availability.UP

    def total_count(self) -> int:
        return self._total.value

    def success_count(self) -> int:
        return self._success.value

    def failure_count(self) -> int:
        return self._failure.value

    def snapshot(self) -> DomainSnapshot:
        """
        Copy the current state.

        Counters are read before the locked section, so a snapshot taken while
        workers are running may lag by a few requests; after all workers have
        exited it is exact.
        """
        total = self._total.value
        success = self._success.value
        failure = self._failure.value
        with self._lock:
            availability = Availability.DOWN if self._down else Availability.UP
            down_since = self._down_since
            transitions = tuple(self._transitions)
        return DomainSnapshot(
            domain=self._domain.name,
            target_url=self._domain.target_url,
            total=total,
            success=success,
            failure=failure,
            availability=availability,
            down_since=down_since,
            transitions=transitions,
            resolution_error=self._domain.resolution_error,
        )
