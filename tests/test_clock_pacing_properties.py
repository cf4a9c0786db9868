"""
Property-based tests for clocks and pacing policies.
"""

from datetime import datetime, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from site_stress.clock import Clock, ManualClock, SystemClock
from site_stress.pacing import DeadlinePacing, IterationPacing


class TestManualClockProperty:
    """Property: the manual clock is monotonic and both scales agree."""

    @given(steps=st.lists(st.floats(min_value=0, max_value=1000), max_size=20))
    @settings(max_examples=100)
    def test_advance_accumulates(self, steps: list) -> None:
        origin = datetime(2024, 1, 1, tzinfo=timezone.utc)
        clock = ManualClock(start=50.0, origin=origin)

        for step in steps:
            clock.advance(step)

        elapsed = clock.monotonic() - 50.0
        assert elapsed == pytest.approx(sum(steps))
        assert (clock.now() - origin).total_seconds() == pytest.approx(elapsed, abs=1e-5)

    def test_cannot_move_backwards(self) -> None:
        clock = ManualClock(start=10.0)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(5.0)
        clock.set(20.0)
        assert clock.monotonic() == 20.0

    def test_both_clocks_satisfy_protocol(self) -> None:
        assert isinstance(ManualClock(), Clock)
        assert isinstance(SystemClock(), Clock)
        assert SystemClock().now().tzinfo is not None


class TestPacingProperty:
    """Property: pacing policies stop exactly at their bound."""

    @given(limit=st.integers(min_value=0, max_value=1000), iterations=st.integers(min_value=0, max_value=2000))
    @settings(max_examples=100)
    def test_iteration_pacing(self, limit: int, iterations: int) -> None:
        assert IterationPacing(limit).should_continue(iterations) == (iterations < limit)

    @given(deadline=st.floats(min_value=0, max_value=1000), now=st.floats(min_value=0, max_value=1000))
    @settings(max_examples=100)
    def test_deadline_pacing(self, deadline: float, now: float) -> None:
        clock = ManualClock(start=now)
        pacing = DeadlinePacing(deadline, clock)

        assert pacing.should_continue(0) == (now < deadline)
        assert pacing.deadline == deadline

    def test_negative_iterations_rejected(self) -> None:
        with pytest.raises(ValueError):
            IterationPacing(-1)

    def test_expiry_announced_once(self) -> None:
        clock = ManualClock()
        calls = []
        pacing = DeadlinePacing(5.0, clock, on_expired=lambda: calls.append(clock.monotonic()))

        assert pacing.should_continue(0)
        clock.advance(4.9)
        assert pacing.should_continue(1)
        assert calls == []

        clock.advance(0.2)
        assert not pacing.should_continue(2)
        assert not pacing.should_continue(0)
        assert calls == [pytest.approx(5.1)]
