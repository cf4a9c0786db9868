"""
Property-based tests for the worker pool.

Requests go through httpx.MockTransport, so no network traffic is made.
"""

import asyncio
import time
from typing import List

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from site_stress.clock import ManualClock, SystemClock
from site_stress.config import TransportConfig
from site_stress.domain_state import DomainState
from site_stress.enums import Availability, TransitionKind
from site_stress.models import Domain, TransitionEvent
from site_stress.pacing import DeadlinePacing, IterationPacing
from site_stress.worker_pool import WorkerPool, build_client, request_headers


DOMAIN = Domain(name="example.com", target_url="https://example.com/")


async def run_pool(
    handler,
    concurrency: int,
    pacing,
    clock: ManualClock = None,
    on_transition=None,
    request_timeout: float = None,
) -> DomainState:
    state = DomainState(DOMAIN, clock or ManualClock())
    transport = httpx.MockTransport(handler)
    async with build_client(TransportConfig(), concurrency, transport) as client:
        pool = WorkerPool(
            domain=DOMAIN,
            state=state,
            client=client,
            concurrency=concurrency,
            pacing=pacing,
            on_transition=on_transition,
            request_timeout=request_timeout,
        )
        await pool.run()
    return state


class TestWorkerCountProperty:
    """
    Property: a pool of K workers with a single-iteration pacing issues
    exactly K requests.
    """

    @given(concurrency=st.integers(min_value=1, max_value=200))
    @settings(max_examples=30, deadline=None)
    def test_exactly_k_requests(self, concurrency: int) -> None:
        seen: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200)

        state = asyncio.run(run_pool(handler, concurrency, IterationPacing(1)))

        assert state.total_count() == concurrency
        assert state.success_count() == concurrency
        assert state.failure_count() == 0
        assert state.availability() is Availability.UP
        assert len(seen) == concurrency
        assert all(url == DOMAIN.target_url for url in seen)

    @given(
        concurrency=st.integers(min_value=1, max_value=20),
        iterations=st.integers(min_value=0, max_value=10),
    )
    @settings(max_examples=30, deadline=None)
    def test_iterations_per_worker(self, concurrency: int, iterations: int) -> None:
        state = asyncio.run(run_pool(
            lambda request: httpx.Response(200),
            concurrency,
            IterationPacing(iterations),
        ))
        assert state.total_count() == concurrency * iterations

    def test_zero_concurrency_rejected(self) -> None:
        with pytest.raises(ValueError):
            WorkerPool(
                domain=DOMAIN,
                state=DomainState(DOMAIN),
                client=httpx.AsyncClient(),
                concurrency=0,
                pacing=IterationPacing(1),
            )


class TestFailureRecordingProperty:
    """Property: transport errors and 5xx responses are recorded as failures."""

    def test_transport_errors_are_failures(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        state = asyncio.run(run_pool(handler, 5, IterationPacing(4)))
        snapshot = state.snapshot()

        assert snapshot.total == 20
        assert snapshot.failure == 20
        assert snapshot.success == 0
        assert len(snapshot.transitions) == 1
        assert snapshot.transitions[0].reason == "connection error"

    def test_timeouts_are_failures(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        state = asyncio.run(run_pool(handler, 3, IterationPacing(2)))

        assert state.failure_count() == 6
        assert state.snapshot().transitions[0].reason == "timeout"

    def test_callback_receives_each_transition_once(self) -> None:
        clock = ManualClock()
        events: List[TransitionEvent] = []

        def handler(request: httpx.Request) -> httpx.Response:
            now = clock.advance(1.0)
            return httpx.Response(503 if now <= 30 else 200)

        state = asyncio.run(run_pool(
            handler, 1, IterationPacing(100), clock=clock, on_transition=events.append
        ))

        assert [e.kind for e in events] == [TransitionKind.DOWN, TransitionKind.UP]
        assert list(state.snapshot().transitions) == events


class TestRequestTimeoutProperty:
    """Property: the request timeout bounds the whole exchange, body included."""

    async def drip_run(self, request_timeout: float, duration: float, concurrency: int):
        handlers: List[asyncio.Task] = []

        async def drip(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            handlers.append(asyncio.current_task())
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\n")
            for _ in range(10):
                await writer.drain()
                await asyncio.sleep(0.3)
                writer.write(b"x")

        server = await asyncio.start_server(drip, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        domain = Domain(name="127.0.0.1", target_url=f"http://127.0.0.1:{port}/")
        clock = SystemClock()
        state = DomainState(domain, clock)
        config = TransportConfig(request_timeout=request_timeout)

        started = time.monotonic()
        try:
            async with build_client(config, concurrency, httpx.AsyncHTTPTransport()) as client:
                pool = WorkerPool(
                    domain=domain,
                    state=state,
                    client=client,
                    concurrency=concurrency,
                    pacing=DeadlinePacing(clock.monotonic() + duration, clock),
                    request_timeout=request_timeout,
                )
                await pool.run()
            elapsed = time.monotonic() - started
        finally:
            for task in handlers:
                task.cancel()
            await asyncio.gather(*handlers, return_exceptions=True)
            server.close()
        return state, elapsed

    def test_slow_body_times_out(self) -> None:
        state, elapsed = asyncio.run(self.drip_run(request_timeout=0.5, duration=0.2, concurrency=2))

        assert elapsed < 1.2
        assert state.success_count() == 0
        assert state.failure_count() == 2
        assert state.snapshot().transitions[0].reason == "timeout"

    def test_slow_mock_response_times_out(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        started = time.monotonic()
        state = asyncio.run(run_pool(handler, 3, IterationPacing(1), request_timeout=0.1))

        assert time.monotonic() - started < 2.0
        assert state.failure_count() == 3
        assert state.availability() is Availability.DOWN


class TestDeadlinePacingProperty:
    """Property: workers stop issuing requests once the deadline has passed."""

    @given(concurrency=st.integers(min_value=1, max_value=50))
    @settings(max_examples=20, deadline=None)
    def test_no_request_starts_after_deadline(self, concurrency: int) -> None:
        clock = ManualClock()
        deadline = 10.0
        late_starts: List[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if clock.monotonic() >= deadline:
                late_starts.append(clock.monotonic())
            clock.advance(0.1)
            return httpx.Response(200)

        state = asyncio.run(run_pool(
            handler, concurrency, DeadlinePacing(deadline, clock), clock=clock
        ))

        # At most the one request per worker that passed the check before the deadline
        assert len(late_starts) <= concurrency
        assert state.total_count() >= 100


class TestClientConfiguration:
    """Unit tests for the shared client."""

    def test_headers_disable_caching(self) -> None:
        headers = request_headers(TransportConfig(extra_headers={"X-Test": "1"}))

        assert "no-cache" in headers["Cache-Control"]
        assert headers["Pragma"] == "no-cache"
        assert headers["User-Agent"].startswith("Mozilla/5.0")
        assert headers["X-Test"] == "1"

    def test_client_does_not_follow_redirects(self) -> None:
        calls: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(301, headers={"Location": "https://elsewhere.example/"})

        state = asyncio.run(run_pool(handler, 2, IterationPacing(1)))

        assert calls == [DOMAIN.target_url, DOMAIN.target_url]
        assert state.success_count() == 2
