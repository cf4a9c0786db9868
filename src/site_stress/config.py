"""
Configuration dataclasses for the site stress system.

This module defines all configuration structures used throughout a run:
the shared HTTP transport, outcome classification, the progress monitor,
report persistence, logging, and the top-level run configuration that
carries the deadline.
"""

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from . import __version__
from .clock import Clock
from .enums import ConfigErrorCode
from .exceptions import ConfigurationError


DEFAULT_USER_AGENT = (
    f"Mozilla/5.0 (compatible; SiteStress/{__version__}; +authorized-load-test) "
    "AppleWebKit/537.36 (KHTML, like Gecko)"
)

# Worker counts per domain; many domains share the run with fewer sockets each
SINGLE_DOMAIN_WORKERS = 1000
MULTI_DOMAIN_WORKERS = 500


def default_workers_per_domain(domain_count: int) -> int:
    """Pick the per-domain concurrency for a run targeting ``domain_count`` domains."""
    if domain_count <= 1:
        return SINGLE_DOMAIN_WORKERS
    return MULTI_DOMAIN_WORKERS


@dataclass
class TransportConfig:
    """Shared HTTP transport settings."""

    request_timeout: float = 4.0
    user_agent: str = DEFAULT_USER_AGENT
    extra_headers: dict[str, str] = field(default_factory=dict)
    verify_tls: bool = True


@dataclass
class ClassificationConfig:
    """Which responses count as failures."""

    failure_status_threshold: int = 500
    failure_statuses: list[int] = field(default_factory=lambda: [429])
    client_errors_are_failures: bool = False


@dataclass
class MonitorConfig:
    """Live progress line settings."""

    enabled: bool = True
    interval_seconds: float = 5.0


@dataclass
class ReportConfig:
    """Report persistence settings."""

    output_dir: Optional[Path] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = False
    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class RunConfig:
    """
    Fully validated configuration of one load-test run.

    ``deadline`` stays None until ``started()`` fixes it; the returned copy is
    the only configuration handed to workers.
    """

    domains: tuple[str, ...]
    duration_seconds: float
    workers_per_domain: int
    transport: TransportConfig = field(default_factory=TransportConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"
    simulation_mode: bool = False
    deadline: Optional[float] = None

    def started(self, clock: Clock) -> "RunConfig":
        """
        Return a copy whose deadline is fixed relative to ``clock``.

        Raises:
            ConfigurationError: If the deadline was already fixed
        """
        if self.deadline is not None:
            raise ConfigurationError(
                code=ConfigErrorCode.INVALID_VALUE.value,
                message="Run deadline has already been fixed",
                details={"deadline": self.deadline},
            )
        return replace(self, deadline=clock.monotonic() + self.duration_seconds)

    def validate(self) -> None:
        """
        Check the configuration for values that make a run impossible.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        if not self.domains:
            raise ConfigurationError(
                code=ConfigErrorCode.NO_DOMAINS.value,
                message="At least one domain is required",
            )
        checks = [
            ("duration_seconds", self.duration_seconds),
            ("workers_per_domain", self.workers_per_domain),
            ("transport.request_timeout", self.transport.request_timeout),
            ("monitor.interval_seconds", self.monitor.interval_seconds),
        ]
        for name, value in checks:
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(
                    code=ConfigErrorCode.INVALID_VALUE.value,
                    message=f"{name} must be a positive finite number",
                    details={"field": name, "value": value},
                )
        if self.logging.output_format not in ("json", "text", "both"):
            raise ConfigurationError(
                code=ConfigErrorCode.INVALID_VALUE.value,
                message=f"Invalid log output format: {self.logging.output_format}",
                details={"field": "logging.output_format"},
            )
        if self.logging.level.lower() not in ("debug", "info", "warn", "error"):
            raise ConfigurationError(
                code=ConfigErrorCode.INVALID_VALUE.value,
                message=f"Invalid log level: {self.logging.level}",
                details={"field": "logging.level"},
            )


def prepare_output_dir(output_dir: Optional[Path]) -> None:
    """
    Create the report directory before any worker is launched.

    Raises:
        ConfigurationError: If the directory cannot be created
    """
    if output_dir is None:
        return
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(
            code=ConfigErrorCode.OUTPUT_DIR.value,
            message=f"Cannot create output directory: {e}",
            details={"output_dir": str(output_dir)},
        ) from e
