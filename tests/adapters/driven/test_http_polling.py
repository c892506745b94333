"""Tests for the polling decorator."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from src.adapters.driven.http.polling import NOT_READY_ERRORS, poll_immediate

__all__ = []


@pytest.mark.asyncio
@pytest.mark.parametrize("exc_type", NOT_READY_ERRORS)
async def test_poll_retries_not_ready_errors(exc_type: type[BaseException]) -> None:
    """Polling should swallow not-ready errors until success."""
    mock_fn = AsyncMock(side_effect=[exc_type(), "ok"])
    wrapped = poll_immediate(interval_sec=0, timeout_sec=5)(mock_fn)

    assert await wrapped() == "ok"
    assert mock_fn.call_count == 2


@pytest.mark.asyncio
async def test_poll_first_call_success() -> None:
    """Polling should call only once when the first call succeeds."""
    mock_fn = AsyncMock(return_value=200)
    wrapped = poll_immediate()(mock_fn)

    assert await wrapped("http://x") == 200
    mock_fn.assert_awaited_once_with("http://x")


@pytest.mark.asyncio
async def test_poll_propagates_other_errors() -> None:
    """Errors that are not transport failures should not be retried."""
    mock_fn = AsyncMock(side_effect=ValueError("Invalid request"))
    wrapped = poll_immediate(interval_sec=0, timeout_sec=5)(mock_fn)

    with pytest.raises(ValueError):
        await wrapped()

    assert mock_fn.call_count == 1


@pytest.mark.asyncio
async def test_poll_times_out() -> None:
    """Polling should raise TimeoutError once the bound elapses."""
    mock_fn = AsyncMock(side_effect=ConnectionRefusedError())
    wrapped = poll_immediate(interval_sec=0.01, timeout_sec=0.05)(mock_fn)

    with pytest.raises(asyncio.TimeoutError, match="not ready after 0.05s"):
        await wrapped()


@pytest.mark.asyncio
async def test_poll_sleeps_interval_between_attempts() -> None:
    """Polling should pause for the interval between attempts."""
    mock_fn = AsyncMock(side_effect=[OSError(), OSError(), "ok"])
    wrapped = poll_immediate(interval_sec=0.1, timeout_sec=60)(mock_fn)

    mock_sleep = AsyncMock()
    with patch("src.adapters.driven.http.polling.asyncio.sleep", mock_sleep):
        await wrapped()

    assert mock_sleep.await_count == 2
    assert mock_sleep.await_args.args == (0.1,)
