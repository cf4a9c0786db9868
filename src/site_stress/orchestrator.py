"""
Stress Orchestrator for the site stress system.

This module provides the orchestration layer that coordinates one run:
- Fixing the shared deadline once
- Resolving every target (DNS lookup and scheme probe)
- One DomainState, one shared HTTP client and one WorkerPool per domain
- The live progress monitor
- Deadline-driven shutdown and the hand-off of final snapshots

Shutdown is cooperative: every worker checks the deadline itself and the
pool join has no timeout. The last request a worker issued before the
deadline can run for at most the configured request timeout.
"""

import asyncio
import sys
from typing import Optional, TextIO

import httpx

from .audit_logger import AuditLogger
from .classifier import ClassificationPolicy
from .clock import Clock, SystemClock
from .config import RunConfig
from .domain_state import DomainState
from .enums import LogLevel, TransitionKind
from .i18n import get_message
from .models import Domain, RunResult, TransitionEvent
from .monitor import Monitor, format_duration
from .pacing import DeadlinePacing
from .report import format_transition
from .resolver import TargetResolver
from .worker_pool import WorkerPool, build_client


# Concurrency of the short-lived client used for the initial scheme probe
PROBE_CONCURRENCY = 4


async def simulated_response(request: httpx.Request) -> httpx.Response:
    """Answer every request with an empty 200 after a short simulated latency."""
    await asyncio.sleep(0.01)
    return httpx.Response(200, request=request)


class StressOrchestrator:
    """
    Main orchestrator for a load-test run.

    Domain states are created here, passed by reference to the workers of
    their domain, read by the monitor, and snapshotted only after every
    worker pool has been joined.
    """

    async def __aenter__(self) -> "StressOrchestrator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        pass

    def __init__(
        self,
        config: RunConfig,
        clock: Optional[Clock] = None,
        logger: Optional[AuditLogger] = None,
        stream: Optional[TextIO] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        resolver: Optional[TargetResolver] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Validated run configuration (deadline not yet fixed)
            clock: Time source for deadlines and downtime; defaults to real time
            logger: Optional audit logger
            stream: Console output stream (defaults to sys.stdout)
            transport: Optional httpx transport for every client (tests)
            resolver: Optional resolver replacing the default DNS/scheme probe
        """
        config.validate()
        self._config = config
        self._clock = clock or SystemClock()
        self._logger = logger
        self._stream = stream or sys.stdout
        self._resolver = resolver
        self._classifier = ClassificationPolicy(config.classification)
        self._language = config.language

        if transport is None and config.simulation_mode:
            transport = httpx.MockTransport(simulated_response)
        self._transport = transport

    async def resolve_targets(self) -> list[Domain]:
        """Run the one-time check for every configured domain, in order."""
        if self._resolver is not None:
            return await self._resolve_with(self._resolver)

        if self._config.simulation_mode:
            return await self._resolve_with(TargetResolver(simulation_mode=True))

        async with build_client(
            self._config.transport, PROBE_CONCURRENCY, self._transport
        ) as client:
            return await self._resolve_with(TargetResolver(client=client))

    async def _resolve_with(self, resolver: TargetResolver) -> list[Domain]:
        domains = []
        for name in self._config.domains:
            self._print(get_message("resolver.initial_check", self._language, domain=name))
            domain = await resolver.resolve(name)

            if domain.addresses:
                self._print(get_message(
                    "resolver.addresses", self._language, addresses=", ".join(domain.addresses)
                ))
            elif not self._config.simulation_mode:
                self._print(get_message("resolver.no_addresses", self._language, domain=name))

            if domain.resolved:
                self._log_info("TargetResolver", f"Target resolved: {domain.target_url}", {
                    "domain": name,
                    "target_url": domain.target_url,
                    "addresses": list(domain.addresses),
                })
            else:
                self._print(get_message(
                    "resolver.fallback", self._language, domain=name, url=domain.target_url
                ))
                self._log(LogLevel.WARN, "TargetResolver", "No scheme answered, using fallback URL", {
                    "domain": name,
                    "target_url": domain.target_url,
                    "error": domain.resolution_error,
                })

            self._print(get_message("resolver.target", self._language, url=domain.target_url))
            domains.append(domain)
        return domains

    async def run(self, domains: Optional[list[Domain]] = None) -> RunResult:
        """
        Execute the load test and return the final snapshots.

        Args:
            domains: Pre-resolved targets; resolved from the configuration when omitted

        Returns:
            RunResult with one snapshot per domain, in original order
        """
        if domains is None:
            domains = await self.resolve_targets()

        config = self._config.started(self._clock)
        started_mono = self._clock.monotonic()
        started_at = self._clock.now()
        workers = config.workers_per_domain

        states = [DomainState(domain, self._clock) for domain in domains]
        clients = [build_client(config.transport, workers, self._transport) for _ in domains]
        pacing = DeadlinePacing(config.deadline, self._clock, on_expired=self._on_time_up)
        pools = [
            WorkerPool(
                domain=domain,
                state=state,
                client=client,
                concurrency=workers,
                pacing=pacing,
                classifier=self._classifier,
                on_transition=self._on_transition,
                request_timeout=config.transport.request_timeout,
            )
            for domain, state, client in zip(domains, states, clients)
        ]

        self._print("")
        self._print(get_message("run.starting", self._language, workers=workers))
        self._print(get_message(
            "run.total_time", self._language, duration=format_duration(config.duration_seconds)
        ))
        self._log_info("StressOrchestrator", "Run started", {
            "domains": [d.name for d in domains],
            "workers_per_domain": workers,
            "duration_seconds": config.duration_seconds,
            "request_timeout": config.transport.request_timeout,
        })

        monitor: Optional[Monitor] = None
        monitor_task: Optional[asyncio.Task] = None
        if config.monitor.enabled:
            monitor = Monitor(
                states=states,
                deadline=config.deadline,
                started=started_mono,
                clock=self._clock,
                interval=config.monitor.interval_seconds,
                stream=self._stream,
                language=self._language,
            )
            monitor_task = asyncio.create_task(monitor.run(), name="monitor")

        try:
            for pool in pools:
                pool.start()
            self._print("")
            await asyncio.gather(*(pool.join() for pool in pools))
        except BaseException:
            for pool in pools:
                await pool.cancel()
            raise
        finally:
            if monitor is not None:
                monitor.stop()
                await monitor_task
            for client in clients:
                await client.aclose()

        result = RunResult(
            started_at=started_at,
            finished_at=self._clock.now(),
            duration_seconds=config.duration_seconds,
            snapshots=tuple(state.snapshot() for state in states),
        )
        self._log_info("StressOrchestrator", "Run finished", {
            "total_requests": result.total_requests,
            "elapsed_seconds": self._clock.monotonic() - started_mono,
        })
        return result

    def _on_time_up(self) -> None:
        self._print("\n" + get_message("run.time_up", self._language))
        self._log_info("StressOrchestrator", "Deadline reached, draining workers", {})

    def _on_transition(self, event: TransitionEvent) -> None:
        self._print("\n" + format_transition(event, self._language))
        level = LogLevel.WARN if event.kind is TransitionKind.DOWN else LogLevel.INFO
        self._log(level, "DomainState", f"{event.domain} is {event.kind.value.upper()}", {
            "domain": event.domain,
            "reason": event.reason,
            "downtime_seconds": event.downtime_seconds,
        })

    def _print(self, message: str) -> None:
        self._stream.write(message + "\n")
        self._stream.flush()

    def _log(self, level: LogLevel, component: str, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, component, message, data)

    def _log_info(self, component: str, message: str, data: dict) -> None:
        """Log an info message if logger is available."""
        self._log(LogLevel.INFO, component, message, data)

    @property
    def config(self) -> RunConfig:
        """Get the run configuration."""
        return self._config
