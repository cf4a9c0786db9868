"""
Site Stress - HTTP load test tool with live availability detection.

This package drives many concurrent workers against one or more web
targets for a bounded duration, detects when a target goes down and comes
back up, and produces a per-domain report with an event log.
"""

__version__ = "1.0.0"
__author__ = "Site Stress Team"

from site_stress.exceptions import (
    SiteStressError,
    ValidationError,
    ConfigurationError,
    ReportError,
)
from site_stress.enums import (
    Availability,
    Outcome,
    TransitionKind,
    LogLevel,
    DomainValidationErrorCode,
    ConfigErrorCode,
)
from site_stress.clock import (
    Clock,
    SystemClock,
    ManualClock,
)
from site_stress.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
    parse_domain_list,
)
from site_stress.config import (
    TransportConfig,
    ClassificationConfig,
    MonitorConfig,
    ReportConfig,
    LoggingConfig,
    RunConfig,
    default_workers_per_domain,
)
from site_stress.models import (
    Domain,
    TransitionEvent,
    DomainSnapshot,
    RunResult,
)
from site_stress.classifier import (
    ClassificationPolicy,
    RequestOutcome,
)
from site_stress.domain_state import (
    AtomicCounter,
    DomainState,
)
from site_stress.pacing import (
    PacingPolicy,
    DeadlinePacing,
    IterationPacing,
)
from site_stress.worker_pool import (
    WorkerPool,
    build_client,
)
from site_stress.monitor import (
    Monitor,
    format_duration,
)
from site_stress.resolver import (
    TargetResolver,
)
from site_stress.report import (
    ReportGenerator,
    format_transition,
)
from site_stress.audit_logger import (
    AuditLogger,
    LogEntry,
)
from site_stress.i18n import (
    get_message,
    get_all_message_keys,
    has_translation,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from site_stress.orchestrator import (
    StressOrchestrator,
)
from site_stress.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Exceptions
    "SiteStressError",
    "ValidationError",
    "ConfigurationError",
    "ReportError",
    # Enums
    "Availability",
    "Outcome",
    "TransitionKind",
    "LogLevel",
    "DomainValidationErrorCode",
    "ConfigErrorCode",
    # Clock
    "Clock",
    "SystemClock",
    "ManualClock",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    "parse_domain_list",
    # Configuration
    "TransportConfig",
    "ClassificationConfig",
    "MonitorConfig",
    "ReportConfig",
    "LoggingConfig",
    "RunConfig",
    "default_workers_per_domain",
    # Models
    "Domain",
    "TransitionEvent",
    "DomainSnapshot",
    "RunResult",
    # Classifier
    "ClassificationPolicy",
    "RequestOutcome",
    # Domain State
    "AtomicCounter",
    "DomainState",
    # Pacing
    "PacingPolicy",
    "DeadlinePacing",
    "IterationPacing",
    # Worker Pool
    "WorkerPool",
    "build_client",
    # Monitor
    "Monitor",
    "format_duration",
    # Resolver
    "TargetResolver",
    # Report
    "ReportGenerator",
    "format_transition",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # I18n
    "get_message",
    "get_all_message_keys",
    "has_translation",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # Orchestrator
    "StressOrchestrator",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
]
