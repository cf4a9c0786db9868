"""
Outcome classification for completed requests.

A request either failed at the transport level or produced an HTTP status;
the policy decides which of those count as the target being unavailable.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from .config import ClassificationConfig
from .enums import Outcome


@dataclass(frozen=True)
class RequestOutcome:
    """Classified result of one request."""

    outcome: Outcome
    status_code: Optional[int] = None
    error: Optional[str] = None  # Exception class name for transport errors

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILURE

    def describe(self) -> str:
        """Short reason used in DOWN transition entries."""
        if self.status_code is not None:
            return f"status {self.status_code}"
        if self.error == "timeout":
            return "timeout"
        return "connection error"


class ClassificationPolicy:
    """
    Maps responses and transport errors to SUCCESS or FAILURE.

    By default transport errors, 5xx and 429 are failures and everything
    else, other 4xx included, counts as the target being reachable.
    """

    def __init__(self, config: Optional[ClassificationConfig] = None) -> None:
        config = config or ClassificationConfig()
        self._threshold = config.failure_status_threshold
        self._failure_statuses = frozenset(config.failure_statuses)
        self._client_errors_are_failures = config.client_errors_are_failures

    def classify_status(self, status_code: int) -> RequestOutcome:
        """Classify an HTTP response by its status code."""
        failed = (
            status_code >= self._threshold
            or status_code in self._failure_statuses
            or (self._client_errors_are_failures and 400 <= status_code < 500)
        )
        return RequestOutcome(
            outcome=Outcome.FAILURE if failed else Outcome.SUCCESS,
            status_code=status_code,
        )

    def classify_error(self, error: httpx.HTTPError) -> RequestOutcome:
        """Classify a transport-level error. Always a failure."""
        if isinstance(error, httpx.TimeoutException):
            return self.classify_timeout()
        return RequestOutcome(outcome=Outcome.FAILURE, error=type(error).__name__)

    def classify_timeout(self) -> RequestOutcome:
        """Classify a request that did not complete within the request timeout."""
        return RequestOutcome(outcome=Outcome.FAILURE, error="timeout")
