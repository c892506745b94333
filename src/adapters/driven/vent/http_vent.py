"""Vent posting outcome records to a recorder over HTTP."""

import asyncio
import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientTimeout

from src.core.errors import VentError
from src.ports.event_info import EventInfo
from src.ports.vent import VentPort

__all__ = ["HttpVent"]

logger = logging.getLogger(__name__)

VENT_TIMEOUT = 10
FIRST_FAILING_HTTP_CODE = 300


class HttpVent(VentPort):
    """POST every outcome record as JSON to a recorder endpoint.

    Each delivery is bounded by a timeout so the send loop never blocks
    indefinitely on the recorder.
    """

    def __init__(self, endpoint: str, *, timeout_sec: float = VENT_TIMEOUT) -> None:
        """Initialize the vent.

        Args:
            endpoint: Recorder URL.
            timeout_sec: Timeout in seconds for one delivery.
        """
        self.endpoint = endpoint
        self.timeout_sec = timeout_sec
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpVent":
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self.session:
            await self.session.close()

    async def vent(self, info: EventInfo) -> None:
        """Deliver one record.

        Raises:
            RuntimeError: If session not initialized.
            VentError: On transport error, timeout or a non-2xx answer.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        try:
            async with self.session.post(
                self.endpoint,
                json=info.to_dict(),
                timeout=ClientTimeout(total=self.timeout_sec),
            ) as resp:
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError, TypeError) as e:
            raise VentError(f"posting event info to {self.endpoint} failed: {e}") from e

        if status >= FIRST_FAILING_HTTP_CODE:
            raise VentError(f"{self.endpoint} rejected event info with status {status}")
        logger.debug(f"Vented {info.kind.value} event info #{info.sequence} to {self.endpoint}")
