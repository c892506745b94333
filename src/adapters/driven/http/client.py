"""HTTP client adapter with sink probing and metrics integration."""

import asyncio
import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientResponse, ClientTimeout

from src.adapters.driven.http.polling import poll_immediate
from src.adapters.driven.http.tracing import make_trace_config
from src.ports.http import HttpPort
from src.ports.metrics import HttpAttemptDto, MetricsPort

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

PROBE_INTERVAL = 0.1
PROBE_TIMEOUT = 60
PROBE_ATTEMPT_TIMEOUT = 5
FIRST_FAILING_HTTP_CODE = 400


class HttpClient:
    """HTTP client for the sink.

    Features:
    - Single-shot sends, transport errors surfaced to the caller.
    - Sink probing with HEAD requests until any response arrives.
    - Optional tracing propagation headers.
    - Metrics collection (latency, failure rate).
    - Context manager for proper resource cleanup.
    """

    def __init__(self, metrics: MetricsPort | None = None, *, tracing: bool = False) -> None:
        """Initialize HTTP client.

        Args:
            metrics: Optional metrics collector to track attempts.
            tracing: Inject tracing propagation headers into sends.
        """
        self.metrics = metrics
        self.tracing = tracing
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        trace_configs = [make_trace_config()] if self.tracing else None
        self.session = aiohttp.ClientSession(trace_configs=trace_configs)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()

    async def _probe_once(self, url: str, timeout: float = PROBE_ATTEMPT_TIMEOUT) -> int:
        """Single HTTP HEAD request against the sink.

        Args:
            url: URL to probe.
            timeout: Timeout in seconds for this attempt.

        Returns:
            HTTP status code of the response.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp exceptions: Network/timeout errors (polled again by caller).
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")
        client_timeout = ClientTimeout(total=timeout)
        resp = await self.session.head(url, timeout=client_timeout, allow_redirects=False)
        return resp.status

    async def probe(
        self,
        url: str,
        timeout_sec: float = PROBE_TIMEOUT,
        interval_sec: float = PROBE_INTERVAL,
    ) -> bool:
        """Wait until the endpoint answers.

        Any response counts, whatever its status; only transport errors
        mean the endpoint is not ready.

        Args:
            url: URL to probe.
            timeout_sec: Overall bound in seconds.
            interval_sec: Pause between attempts in seconds.

        Returns:
            True once a response arrived, False if the bound elapsed.
        """
        poll = poll_immediate(interval_sec=interval_sec, timeout_sec=timeout_sec)(self._probe_once)
        attempt_timeout = PROBE_ATTEMPT_TIMEOUT
        if 0 < timeout_sec < attempt_timeout:
            attempt_timeout = timeout_sec
        try:
            status = await poll(url, attempt_timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Probe failed for {url}: {e}")
            return False

        logger.info(f"Probe for {url} returned status {status}")
        return True

    async def _raw_request(self, req: HttpPort) -> ClientResponse:
        """Single HTTP request, no retry.

        Args:
            req: HTTP request with method, URL, headers and body.

        Returns:
            HTTP response, body not yet read.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp exceptions: Network/timeout errors.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        return await self.session.request(req.method, req.url, headers=req.headers, data=req.body)

    async def send(self, req: HttpPort) -> ClientResponse:
        """Send HTTP request and record metrics.

        Args:
            req: HTTP request object.

        Returns:
            HTTP response.

        Raises:
            aiohttp exceptions: Transport errors, after being recorded.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()

        try:
            resp = await self._raw_request(req=req)
        except Exception:
            self._record(
                HttpAttemptDto(started_at_sec=started, finished_at_sec=loop.time(), is_failed=True)
            )
            raise

        self._record(
            HttpAttemptDto(
                started_at_sec=started,
                finished_at_sec=loop.time(),
                is_failed=resp.status >= FIRST_FAILING_HTTP_CODE,
                status_code=resp.status,
            )
        )
        return resp

    def _record(self, attempt: HttpAttemptDto) -> None:
        if self.metrics:
            self.metrics.update(attempt)
            logger.info(f"HTTP metrics: {self.metrics}")
