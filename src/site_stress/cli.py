"""
Command-line interface for the site stress system.

This module provides the main CLI entry point with commands for:
- run: Generate load against one or more domains for a bounded duration
- probe: Resolve targets and report the URL a run would use
- config: Configuration file management

Every argument is validated before the core is invoked; the orchestrator
only ever receives a complete RunConfig.
"""

import argparse
import asyncio
import json
import os
import platform
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .audit_logger import AuditLogger, create_logger
from .config import (
    ClassificationConfig,
    LoggingConfig,
    MonitorConfig,
    ReportConfig,
    RunConfig,
    TransportConfig,
    default_workers_per_domain,
    prepare_output_dir,
)
from .domain_validator import DomainValidator, parse_domain_list
from .enums import LogLevel
from .exceptions import ConfigurationError, ReportError, ValidationError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .models import RunResult
from .orchestrator import StressOrchestrator
from .report import ReportGenerator


DEFAULT_CONFIG_PATH = Path.home() / ".sitestress" / "config.json"

# Duration used when neither flags, environment nor config file provide one
DEFAULT_DURATION_SECONDS = 60.0


def _float_env(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def create_default_config(
    domains: tuple[str, ...] = (),
    duration_seconds: float = DEFAULT_DURATION_SECONDS,
    language: str = "en",
    simulation_mode: bool = False,
) -> RunConfig:
    """
    Create a default run configuration.

    Args:
        domains: Canonical target domains
        duration_seconds: Length of the run
        language: Output language ('en' or 'nl')
        simulation_mode: Enable simulation mode (no real network requests)

    Returns:
        RunConfig with default settings; workers_per_domain follows the domain
        count, or is 0 ("automatic") when no domains are known yet
    """
    return RunConfig(
        domains=tuple(domains),
        duration_seconds=duration_seconds,
        workers_per_domain=default_workers_per_domain(len(domains)) if domains else 0,
        transport=TransportConfig(),
        classification=ClassificationConfig(),
        monitor=MonitorConfig(),
        report=ReportConfig(),
        logging=LoggingConfig(),
        language=language,
        simulation_mode=simulation_mode,
    )


def load_config_from_file(config_path: Path) -> Optional[RunConfig]:
    """
    Load configuration from a JSON file.

    A ``workers_per_domain`` of 0 (or missing) means "derive from the domain
    count" and is resolved by the CLI once the final domain list is known.

    Args:
        config_path: Path to the configuration file

    Returns:
        RunConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        transport_data = data.get("transport", {})
        transport = TransportConfig(
            request_timeout=float(transport_data.get("request_timeout", 4.0)),
            user_agent=transport_data.get("user_agent") or TransportConfig().user_agent,
            extra_headers=dict(transport_data.get("extra_headers", {})),
            verify_tls=bool(transport_data.get("verify_tls", True)),
        )

        classification_data = data.get("classification", {})
        classification = ClassificationConfig(
            failure_status_threshold=int(classification_data.get("failure_status_threshold", 500)),
            failure_statuses=[int(s) for s in classification_data.get("failure_statuses", [429])],
            client_errors_are_failures=bool(
                classification_data.get("client_errors_are_failures", False)
            ),
        )

        monitor_data = data.get("monitor", {})
        monitor = MonitorConfig(
            enabled=bool(monitor_data.get("enabled", True)),
            interval_seconds=float(monitor_data.get("interval_seconds", 5.0)),
        )

        report_data = data.get("report", {})
        output_dir = report_data.get("output_dir")
        report = ReportConfig(output_dir=Path(output_dir) if output_dir else None)

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            enabled=bool(logging_data.get("enabled", False)),
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        return RunConfig(
            domains=tuple(data.get("domains", [])),
            duration_seconds=float(data.get("duration_seconds", DEFAULT_DURATION_SECONDS)),
            workers_per_domain=int(data.get("workers_per_domain") or 0),
            transport=transport,
            classification=classification,
            monitor=monitor,
            report=report,
            logging=logging_config,
            language=data.get("language", "en"),
            simulation_mode=bool(data.get("simulation_mode", False)),
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: RunConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: RunConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "domains": list(config.domains),
            "duration_seconds": config.duration_seconds,
            "workers_per_domain": config.workers_per_domain,
            "transport": {
                "request_timeout": config.transport.request_timeout,
                "user_agent": config.transport.user_agent,
                "extra_headers": config.transport.extra_headers,
                "verify_tls": config.transport.verify_tls,
            },
            "classification": {
                "failure_status_threshold": config.classification.failure_status_threshold,
                "failure_statuses": config.classification.failure_statuses,
                "client_errors_are_failures": config.classification.client_errors_are_failures,
            },
            "monitor": {
                "enabled": config.monitor.enabled,
                "interval_seconds": config.monitor.interval_seconds,
            },
            "report": {
                "output_dir": str(config.report.output_dir) if config.report.output_dir else None,
            },
            "logging": {
                "enabled": config.logging.enabled,
                "level": config.logging.level,
                "output_format": config.logging.output_format,
            },
            "language": config.language,
            "simulation_mode": config.simulation_mode,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def _load_base_config(args: argparse.Namespace) -> Optional[RunConfig]:
    """Config file from --config or SITESTRESS_CONFIG, else defaults."""
    config_arg = getattr(args, "config", None) or os.getenv("SITESTRESS_CONFIG")
    if config_arg:
        config = load_config_from_file(Path(config_arg))
        if config is None:
            print(f"Error: Could not load config from {config_arg}", file=sys.stderr)
        return config
    return create_default_config()


def _resolve_domains(args: argparse.Namespace, config: RunConfig) -> tuple[str, ...]:
    """
    Domains from -d, SITESTRESS_DOMAINS or the config file, normalized.

    Raises:
        ValidationError: If an entry is not a usable host name
    """
    raw = args.domain or os.getenv("SITESTRESS_DOMAINS", "")
    entries = parse_domain_list(raw) if raw else list(config.domains)
    return tuple(DomainValidator().normalize_all(entries))


def build_run_config(args: argparse.Namespace, base: RunConfig) -> RunConfig:
    """
    Merge command-line arguments and environment defaults into ``base``.

    Raises:
        ValidationError: If a domain is malformed
        ConfigurationError: If the merged configuration is invalid
    """
    domains = _resolve_domains(args, base)

    minutes = args.minutes if args.minutes is not None else _float_env("SITESTRESS_MINUTES")
    duration = minutes * 60.0 if minutes is not None else base.duration_seconds

    output = args.output or os.getenv("SITESTRESS_OUTPUT_DIR") or None
    output_dir = Path(output) if output else base.report.output_dir

    language = args.language or os.getenv("SITESTRESS_LANGUAGE") or base.language
    if language not in SUPPORTED_LANGUAGES:
        language = "en"

    transport = base.transport
    if args.timeout is not None:
        transport = replace(transport, request_timeout=args.timeout)

    classification = base.classification
    if args.client_errors_as_failures:
        classification = replace(classification, client_errors_are_failures=True)

    monitor = base.monitor
    if args.interval is not None:
        monitor = replace(monitor, interval_seconds=args.interval)
    if args.no_progress:
        monitor = replace(monitor, enabled=False)

    logging_config = base.logging
    if args.verbose:
        logging_config = replace(logging_config, enabled=True)

    workers = args.workers or base.workers_per_domain or default_workers_per_domain(len(domains))

    config = replace(
        base,
        domains=domains,
        duration_seconds=duration,
        workers_per_domain=workers,
        transport=transport,
        classification=classification,
        monitor=monitor,
        report=ReportConfig(output_dir=output_dir),
        logging=logging_config,
        language=language,
        simulation_mode=base.simulation_mode or args.dry_run,
    )
    config.validate()
    return config


def print_banner(language: str) -> None:
    print(get_message("cli.banner", language, version=__version__))
    print(get_message(
        "cli.platform",
        language,
        version=__version__,
        platform=f"{sys.platform}/{platform.machine()}",
    ))
    print(get_message("cli.authorization_warning", language))
    print()


def finish_report(
    result: RunResult,
    config: RunConfig,
    logger: Optional[AuditLogger] = None,
) -> Optional[Path]:
    """
    Print the report and persist it when an output directory is configured.

    A failure to write is reported but never changes the outcome of the run.

    Returns:
        Path of the written report, or None
    """
    generator = ReportGenerator(config.language)
    lines = generator.render(result)
    generator.print(lines)

    if config.report.output_dir is None:
        return None

    try:
        path = generator.write(lines, config.report.output_dir, result.finished_at)
    except ReportError as e:
        print("\n" + get_message("report.save_failed", config.language, error=e.message))
        if logger:
            logger.log_error("ReportGenerator", "Report could not be saved", error=e)
        return None

    print("\n" + get_message("report.saved", config.language, path=path))
    if logger:
        logger.log(LogLevel.INFO, "ReportGenerator", "Report saved", {"path": str(path)})
    return path


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the 'run' command."""
    base = _load_base_config(args)
    if base is None:
        return 1

    try:
        config = build_run_config(args, base)
    except ValidationError as e:
        print(get_message("cli.validation_error", args.language, error=e.message), file=sys.stderr)
        return 2
    except ConfigurationError as e:
        print(get_message("cli.config_error", args.language, error=e.message), file=sys.stderr)
        return 2

    try:
        prepare_output_dir(config.report.output_dir)
        logger = create_logger(
            config.logging.enabled,
            config.logging.level,
            config.logging.output_format,
        )
    except (ConfigurationError, ValueError) as e:
        message = e.message if isinstance(e, ConfigurationError) else str(e)
        print(get_message("cli.config_error", config.language, error=message), file=sys.stderr)
        return 1

    print_banner(config.language)
    if config.simulation_mode:
        print(get_message("cli.simulation", config.language))

    async def run() -> RunResult:
        async with StressOrchestrator(config=config, logger=logger) as orchestrator:
            return await orchestrator.run()

    result = asyncio.run(run())
    finish_report(result, config, logger)
    return 0


def cmd_probe(args: argparse.Namespace) -> int:
    """Handle the 'probe' command."""
    base = create_default_config(language=args.language or "en")
    try:
        domains = _resolve_domains(args, base)
    except ValidationError as e:
        print(get_message("cli.validation_error", base.language, error=e.message), file=sys.stderr)
        return 2
    if not domains:
        print("Error: No domains given", file=sys.stderr)
        return 2

    transport = base.transport
    if args.timeout is not None:
        transport = replace(transport, request_timeout=args.timeout)
    config = replace(
        base,
        domains=domains,
        transport=transport,
        workers_per_domain=default_workers_per_domain(len(domains)),
    )

    async def probe() -> list:
        async with StressOrchestrator(config=config) as orchestrator:
            return await orchestrator.resolve_targets()

    try:
        resolved = asyncio.run(probe())
    except ConfigurationError as e:
        print(get_message("cli.config_error", config.language, error=e.message), file=sys.stderr)
        return 1

    print()
    for domain in resolved:
        if domain.resolved:
            status = get_message("probe.reachable", config.language)
        else:
            status = get_message("probe.unreachable", config.language, error=domain.resolution_error)
        print(f"  {domain.name}: {domain.target_url} - {status}")

    return 0 if all(d.resolved for d in resolved) else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Language: {config.language}")
        print(f"  Simulation mode: {config.simulation_mode}")
        print(f"  Domains: {', '.join(config.domains) or '(none)'}")
        print(f"  Duration: {config.duration_seconds:.0f}s")
        print(f"  Workers per domain: {config.workers_per_domain or 'auto'}")
        print(f"  Request timeout: {config.transport.request_timeout}s")
        print(f"  Monitor interval: {config.monitor.interval_seconds}s")
        print(f"  Report directory: {config.report.output_dir or '(none)'}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = create_default_config(language=args.language)
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        if config.domains:
            try:
                DomainValidator().normalize_all(list(config.domains))
                workers = config.workers_per_domain or default_workers_per_domain(len(config.domains))
                replace(config, workers_per_domain=workers).validate()
            except (ValidationError, ConfigurationError) as e:
                print(f"Configuration at {config_path} is invalid: {e.message}", file=sys.stderr)
                return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="sitestress",
        description="HTTP load test tool with live availability detection",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'run' command
    run_parser = subparsers.add_parser(
        "run",
        help="Generate load against one or more domains",
    )
    run_parser.add_argument(
        "--domain", "-d",
        help="Domain(s) to test, comma-separated (e.g. example.com,test.nl)",
    )
    run_parser.add_argument(
        "--minutes", "-t",
        type=float,
        help="Duration of the run in minutes",
    )
    run_parser.add_argument(
        "--output", "-o",
        help="Directory to store the report in",
    )
    run_parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Workers per domain (default: 1000 for one domain, 500 otherwise)",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds (default: 4)",
    )
    run_parser.add_argument(
        "--interval",
        type=float,
        help="Progress line refresh interval in seconds (default: 5)",
    )
    run_parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not render the live progress line",
    )
    run_parser.add_argument(
        "--client-errors-as-failures",
        action="store_true",
        help="Count every 4xx response as the target being down",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no real network requests",
    )
    run_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    run_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Output language (default: en)",
    )
    run_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable structured logging on stderr",
    )
    run_parser.set_defaults(func=cmd_run)

    # 'probe' command
    probe_parser = subparsers.add_parser(
        "probe",
        help="Resolve targets without generating load",
    )
    probe_parser.add_argument(
        "--domain", "-d",
        help="Domain(s) to probe, comma-separated",
    )
    probe_parser.add_argument(
        "--timeout",
        type=float,
        help="Probe timeout in seconds (default: 4)",
    )
    probe_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Output language (default: en)",
    )
    probe_parser.set_defaults(func=cmd_probe)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default="en",
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
