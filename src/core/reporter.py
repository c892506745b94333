"""Turns sent requests and their responses into outcome records."""

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime, timezone

import aiohttp
from aiohttp import ClientResponse

from src.core.cloudevents import CloudEvent
from src.core.encoding import MessageEncoding, read_encoding, to_event
from src.core.errors import VentError
from src.ports.event_info import EventInfo, EventKind
from src.ports.http import HttpPort
from src.ports.settings import SenderSettingsPort
from src.ports.vent import VentPort

__all__ = ["report", "response_info", "sent_info"]

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _canonical_key(key: str) -> str:
    return "-".join(part.capitalize() for part in key.split("-"))


def _snapshot_headers(headers: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Copy headers into a plain mapping of canonical name to values."""
    snapshot: dict[str, list[str]] = {}
    for key, value in headers:
        snapshot.setdefault(_canonical_key(key), []).append(value)
    return snapshot


def sent_info(
    settings: SenderSettingsPort,
    sequence: int,
    event: CloudEvent | None,
    request: HttpPort,
    error: BaseException | None,
) -> EventInfo:
    """Describe one send attempt.

    On error only the error message is recorded. Otherwise the record
    carries a copy of the request headers, the event and, when a static
    body was configured, that body.
    """
    sent_id = event.id if event is not None else None

    if error is not None:
        return EventInfo(
            kind=EventKind.SENT,
            error=str(error) or type(error).__name__,
            origin=settings.sender_name,
            observer=settings.sender_name,
            time=_now(),
            sequence=sequence,
            sent_id=sent_id,
        )

    return EventInfo(
        kind=EventKind.SENT,
        event=event,
        origin=settings.sender_name,
        observer=settings.sender_name,
        time=_now(),
        sequence=sequence,
        http_headers=_snapshot_headers(request.headers.items()),
        body=settings.input_body.encode() if settings.input_body else None,
        sent_id=sent_id,
    )


async def response_info(
    settings: SenderSettingsPort,
    sequence: int,
    response: ClientResponse,
    event: CloudEvent | None,
) -> EventInfo:
    """Describe the response to one send.

    A CloudEvent response is decoded into an event; anything else is kept
    as the raw body. Read and decode failures end up in ``error``.
    """
    info = EventInfo(
        kind=EventKind.RESPONSE,
        http_headers=_snapshot_headers(response.headers.items()),
        origin=settings.sink,
        observer=settings.sender_name,
        time=_now(),
        sequence=sequence,
        status_code=response.status,
        sent_id=event.id if event is not None else None,
    )

    encoding = read_encoding(response.headers)
    try:
        body = await response.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        info.error = str(e) or type(e).__name__
        return info

    if encoding is MessageEncoding.UNKNOWN:
        info.body = body
        return info

    try:
        info.event = to_event(encoding, response.headers, body)
    except ValueError as e:
        logger.debug(f"Response to event #{sequence} is not a readable CloudEvent: {e}")
        info.error = str(e)
    return info


async def report(vent: VentPort, info: EventInfo) -> None:
    """Hand one record to the vent.

    Raises:
        VentError: If the vent could not deliver the record.
    """
    try:
        await vent.vent(info)
    except VentError as e:
        raise VentError(f"cannot forward event info: {e}") from e
