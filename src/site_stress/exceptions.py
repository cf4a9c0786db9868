"""
Exception classes for the site stress system.

All exceptions inherit from SiteStressError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class SiteStressError(Exception):
    """Base exception for all site stress errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(SiteStressError):
    """Raised when a target domain cannot be normalized."""

    pass


class ConfigurationError(SiteStressError):
    """Raised for fatal configuration problems detected before a run starts."""

    pass


class ReportError(SiteStressError):
    """Raised when the final report cannot be persisted."""

    pass
