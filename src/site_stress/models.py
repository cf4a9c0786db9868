"""
Data models for the site stress system.

This module defines the immutable records exchanged between components:
resolved targets, transition log entries, and the post-run snapshots
handed to the report generator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import Availability, TransitionKind


@dataclass(frozen=True)
class Domain:
    """A resolved target. Never changes after resolution."""

    name: str  # Canonical host, optionally with port
    target_url: str  # URL every worker requests
    addresses: tuple[str, ...] = ()  # IPs seen during resolution
    resolution_error: Optional[str] = None  # Set when the fallback URL is used

    @property
    def resolved(self) -> bool:
        """True when a URL scheme answered during the initial probe."""
        return self.resolution_error is None


@dataclass(frozen=True)
class TransitionEvent:
    """A single edge in a domain's availability."""

    domain: str
    kind: TransitionKind
    occurred_at: datetime
    reason: Optional[str] = None  # Why the domain went DOWN
    downtime_seconds: Optional[float] = None  # How long it was DOWN, for UP edges


@dataclass(frozen=True)
class DomainSnapshot:
    """Point-in-time copy of a DomainState."""

    domain: str
    target_url: str
    total: int
    success: int
    failure: int
    availability: Availability
    down_since: Optional[float]
    transitions: tuple[TransitionEvent, ...]
    resolution_error: Optional[str] = None

    @property
    def is_consistent(self) -> bool:
        """True when every counted request was classified exactly once."""
        return self.total == self.success + self.failure


@dataclass(frozen=True)
class RunResult:
    """Final, race-free outcome of a run, in original domain order."""

    started_at: datetime
    finished_at: datetime
    duration_seconds: float
    snapshots: tuple[DomainSnapshot, ...]

    @property
    def total_requests(self) -> int:
        return sum(s.total for s in self.snapshots)
