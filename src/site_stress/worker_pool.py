"""
Worker pool for one target domain.

Every worker runs the same unthrottled loop against the domain's URL:
request, classify, record, repeat. Workers stop on their own once the
pacing policy says so. A request in flight is never cut short by the
deadline; the request timeout bounds the whole exchange, body included.
"""

import asyncio
from typing import Callable, Optional

import httpx

from .classifier import ClassificationPolicy, RequestOutcome
from .config import TransportConfig
from .domain_state import DomainState
from .models import Domain, TransitionEvent
from .pacing import PacingPolicy


TransitionCallback = Callable[[TransitionEvent], None]


def request_headers(config: TransportConfig) -> dict[str, str]:
    """Fixed header set sent with every request."""
    headers = {
        "User-Agent": config.user_agent,
        "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
        "Cache-Control": "no-cache, no-store, must-revalidate",
        "Pragma": "no-cache",
        "Connection": "keep-alive",
    }
    headers.update(config.extra_headers)
    return headers


def build_client(
    config: TransportConfig,
    concurrency: int,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client shared by all workers of one domain.

    The connection pool is as large as the worker count so that waiting for a
    free connection is never mistaken for the target failing.

    Args:
        config: Transport settings
        concurrency: Number of workers that will share the client
        transport: Optional transport replacing the network (simulation, tests)
    """
    kwargs = {
        "headers": request_headers(config),
        "timeout": httpx.Timeout(config.request_timeout),
        "limits": httpx.Limits(
            max_connections=concurrency,
            max_keepalive_connections=concurrency,
            keepalive_expiry=90.0,
        ),
        "follow_redirects": False,
    }
    if transport is not None:
        kwargs["transport"] = transport
    else:
        kwargs["verify"] = config.verify_tls
    return httpx.AsyncClient(**kwargs)


class WorkerPool:
    """
    Fixed-size set of workers hammering a single domain.

    Usage:
        pool = WorkerPool(domain, state, client, 500, pacing, classifier)
        pool.start()
        ...
        await pool.join()
    """

    def __init__(
        self,
        domain: Domain,
        state: DomainState,
        client: httpx.AsyncClient,
        concurrency: int,
        pacing: PacingPolicy,
        classifier: Optional[ClassificationPolicy] = None,
        on_transition: Optional[TransitionCallback] = None,
        request_timeout: Optional[float] = None,
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self._domain = domain
        self._state = state
        self._client = client
        self._concurrency = concurrency
        self._pacing = pacing
        self._classifier = classifier or ClassificationPolicy()
        self._on_transition = on_transition
        self._request_timeout = request_timeout
        self._tasks: list[asyncio.Task] = []

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def state(self) -> DomainState:
        return self._state

    def start(self) -> None:
        """Launch exactly ``concurrency`` workers on the running event loop."""
        if self._tasks:
            raise RuntimeError(f"Worker pool for {self._domain.name} already started")
        self._tasks = [
            asyncio.create_task(self._worker(), name=f"{self._domain.name}-worker-{i}")
            for i in range(self._concurrency)
        ]

    async def join(self) -> None:
        """
        Wait until every worker has exited.

        There is no timeout; if a worker fails with an unexpected exception the
        remaining workers are cancelled and the exception propagates.
        """
        try:
            await asyncio.gather(*self._tasks)
        except BaseException:
            await self.cancel()
            raise

    async def cancel(self) -> None:
        """Cancel every worker that is still running and wait for them to finish."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)

    async def run(self) -> None:
        """Start the pool and wait for it to drain."""
        self.start()
        await self.join()

    async def _worker(self) -> None:
        iterations = 0
        while self._pacing.should_continue(iterations):
            outcome = await self._send()
            event = self._state.record_outcome(outcome)
            if event is not None and self._on_transition is not None:
                self._on_transition(event)
            iterations += 1
            # Other workers get a turn even if the transport never suspended
            await asyncio.sleep(0)

    async def _send(self) -> RequestOutcome:
        # httpx timeouts apply per phase; a slowly dripping body never trips them
        try:
            response = await asyncio.wait_for(
                self._client.get(self._domain.target_url),
                timeout=self._request_timeout,
            )
        except asyncio.TimeoutError:
            return self._classifier.classify_timeout()
        except httpx.HTTPError as e:
            return self._classifier.classify_error(e)
        return self._classifier.classify_status(response.status_code)
