"""
Enumeration types for the site stress system.

These enums provide type-safe constants for availability states, request
outcomes, transition kinds, and configuration options throughout the system.
"""

from enum import Enum


class Availability(Enum):
    """Reachability of a target domain as seen by its workers."""

    UP = "up"
    DOWN = "down"


class Outcome(Enum):
    """Binary classification of a single completed request."""

    SUCCESS = "success"
    FAILURE = "failure"


class TransitionKind(Enum):
    """Edge recorded in a domain's transition log."""

    DOWN = "down"
    UP = "up"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> int:
        """Numeric rank used for level filtering."""
        return _SEVERITY[self]


_SEVERITY = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    EMPTY_INPUT = "empty_input"


class ConfigErrorCode(Enum):
    """Error codes for configuration failures."""

    INVALID_VALUE = "invalid_value"
    NO_DOMAINS = "no_domains"
    OUTPUT_DIR = "output_dir"
    FILE_ERROR = "file_error"
