"""
Stop conditions for worker loops.

Workers never wait between requests; a pacing policy only decides whether
another request may be issued.
"""

from typing import Callable, Optional, Protocol

from .clock import Clock


class PacingPolicy(Protocol):
    """Decides whether a worker may issue its next request."""

    def should_continue(self, iterations: int) -> bool:
        """
        Args:
            iterations: Requests this worker has completed so far
        """
        ...


class DeadlinePacing:
    """
    Keep going until the shared deadline has passed.

    ``on_expired`` is called once, by the first worker that sees the deadline
    has passed, while the others may still be finishing their last request.
    """

    def __init__(
        self,
        deadline: float,
        clock: Clock,
        on_expired: Optional[Callable[[], None]] = None,
    ) -> None:
        self._deadline = deadline
        self._clock = clock
        self._on_expired = on_expired
        self._expired = False

    @property
    def deadline(self) -> float:
        return self._deadline

    def should_continue(self, iterations: int) -> bool:
        if self._clock.monotonic() < self._deadline:
            return True
        if not self._expired:
            self._expired = True
            if self._on_expired is not None:
                self._on_expired()
        return False


class IterationPacing:
    """Stop each worker after a fixed number of requests."""

    def __init__(self, max_iterations: int) -> None:
        if max_iterations < 0:
            raise ValueError("max_iterations must not be negative")
        self._max_iterations = max_iterations

    def should_continue(self, iterations: int) -> bool:
        return iterations < self._max_iterations
