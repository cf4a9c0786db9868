"""
Live progress monitor.

Periodically renders one overwritten status line from the domain states.
The monitor only reads: counters without locking, the availability flag
through DomainState.is_down().
"""

import asyncio
import sys
from typing import Optional, Sequence, TextIO

from .clock import Clock
from .domain_state import DomainState
from .i18n import get_message


STATUS_UP = "🟢"
STATUS_DOWN = "🔴"


def format_duration(seconds: float) -> str:
    """Render a duration rounded to whole seconds, e.g. '1h2m3s', '4m55s', '10s'."""
    total = int(round(max(seconds, 0.0)))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


class Monitor:
    """Read-only aggregator printing remaining time, throughput and per-domain status."""

    def __init__(
        self,
        states: Sequence[DomainState],
        deadline: float,
        started: float,
        clock: Clock,
        interval: float = 5.0,
        stream: Optional[TextIO] = None,
        language: str = "en",
    ) -> None:
        self._states = list(states)
        self._deadline = deadline
        self._started = started
        self._clock = clock
        self._interval = interval
        self._stream = stream or sys.stdout
        self._language = language
        self._stopped = False
        self._stop_event: Optional[asyncio.Event] = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        """Number of lines rendered so far."""
        return self._ticks

    def throughput(self, now: Optional[float] = None) -> float:
        """Aggregate requests per second since the run started."""
        now = self._clock.monotonic() if now is None else now
        elapsed = now - self._started
        if elapsed <= 0:
            return 0.0
        return sum(state.total_count() for state in self._states) / elapsed

    def render_line(self, now: Optional[float] = None) -> str:
        """Build the status line for the given monotonic time."""
        now = self._clock.monotonic() if now is None else now
        parts = [
            get_message(
                "monitor.summary",
                self._language,
                remaining=format_duration(self._deadline - now),
                rps=f"{self.throughput(now):.0f}",
            )
        ]
        for state in self._states:
            parts.append(get_message(
                "monitor.domain",
                self._language,
                domain=state.domain.name,
                status=STATUS_DOWN if state.is_down() else STATUS_UP,
                failures=state.failure_count(),
            ))
        return " | ".join(parts)

    async def run(self) -> None:
        """Tick until the deadline passes or stop() is called."""
        self._stop_event = asyncio.Event()
        if self._stopped:
            self._stop_event.set()
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            if self._stop_event.is_set() or self._clock.monotonic() >= self._deadline:
                break
            self._stream.write("\r" + self.render_line())
            self._stream.flush()
            self._ticks += 1

    def stop(self) -> None:
        """Ask the loop to exit at its next wake-up."""
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()
