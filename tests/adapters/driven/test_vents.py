"""Tests for the outcome record vents."""

import json
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, Mock

import aiohttp
import pytest

from src.adapters.driven.vent.http_vent import HttpVent
from src.adapters.driven.vent.log_vent import VENT_LOGGER, LogVent
from src.core.cloudevents import CloudEvent
from src.core.errors import VentError
from src.ports.event_info import EventInfo, EventKind

__all__ = []

ENDPOINT = "http://recorder.test/events"


def make_info(**kwargs: object) -> EventInfo:
    """Create a Sent record."""
    return EventInfo(
        kind=EventKind.SENT,
        origin="sender",
        observer="sender",
        time=datetime(2024, 1, 15, 12, tzinfo=timezone.utc),
        sequence=1,
        **kwargs,  # type: ignore[arg-type]
    )


def make_post(status: int = 202, error: Exception | None = None) -> Mock:
    """Create a fake session.post returning an async response context."""
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=Mock(status=status), side_effect=error)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return Mock(return_value=ctx)


@pytest.mark.asyncio
async def test_log_vent_writes_json_line(caplog: pytest.LogCaptureFixture) -> None:
    """LogVent should log each record as JSON."""
    caplog.set_level(logging.INFO, logger=VENT_LOGGER)

    async with LogVent() as vent:
        await vent.vent(make_info(sent_id="a"))

    record = json.loads(caplog.records[-1].getMessage())
    assert record["kind"] == "Sent"
    assert record["sentId"] == "a"


@pytest.mark.asyncio
async def test_log_vent_rejects_unserializable_records() -> None:
    """LogVent should raise VentError when a record cannot be written."""
    info = make_info(event=CloudEvent(id="a", type="t", data={1, 2}))

    with pytest.raises(VentError, match="cannot serialize Sent event info"):
        await LogVent().vent(info)


@pytest.mark.asyncio
async def test_http_vent_posts_record() -> None:
    """HttpVent should POST the JSON record."""
    vent = HttpVent(ENDPOINT, timeout_sec=3)
    vent.session = Mock()
    vent.session.post = make_post(202)
    info = make_info(error="refused")

    await vent.vent(info)

    vent.session.post.return_value.__aexit__.assert_awaited_once()

    call = vent.session.post.call_args
    assert call.args == (ENDPOINT,)
    assert call.kwargs["json"] == info.to_dict()
    assert call.kwargs["timeout"].total == 3


@pytest.mark.asyncio
async def test_http_vent_rejects_error_status() -> None:
    """A non-2xx answer should be a delivery failure."""
    vent = HttpVent(ENDPOINT)
    vent.session = Mock()
    vent.session.post = make_post(500)

    with pytest.raises(VentError, match="status 500"):
        await vent.vent(make_info())

    vent.session.post.return_value.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_http_vent_wraps_transport_errors() -> None:
    """Transport errors should be delivery failures."""
    vent = HttpVent(ENDPOINT)
    vent.session = Mock()
    vent.session.post = make_post(error=aiohttp.ClientConnectionError("refused"))

    with pytest.raises(VentError, match="refused"):
        await vent.vent(make_info())


@pytest.mark.asyncio
async def test_http_vent_requires_session() -> None:
    """vent() should raise if the session is not started."""
    with pytest.raises(RuntimeError, match="Session not initialized"):
        await HttpVent(ENDPOINT).vent(make_info())


@pytest.mark.asyncio
async def test_http_vent_context_manager() -> None:
    """HttpVent should open and close its session."""
    vent = HttpVent(ENDPOINT)

    async with vent:
        assert vent.session is not None

    assert vent.session.closed
