"""Send loop: delay, sink probe, then periodic build/send/report."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import aiohttp
from aiohttp import ClientResponse

from src.core.builder import BuiltMessage, build_message
from src.core.encoding import select_writer
from src.core.errors import ProbeTimeoutError
from src.core.reporter import report, response_info, sent_info
from src.core.template import EventTemplate
from src.ports.http import HttpPort
from src.ports.settings import SenderSettingsPort
from src.ports.vent import VentPort

__all__ = ["TRANSPORT_ERRORS", "get_now_time", "has_next", "start_sender", "wait_for_stop"]

logger = logging.getLogger(__name__)

# Failures of a single exchange; recorded, never fatal.
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)

SendFn = Callable[[HttpPort], Awaitable[ClientResponse]]
ProbeFn = Callable[[str, float], Awaitable[bool]]


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Uses event loop's monotonic clock for accurate scheduling
    without wall-clock drift.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


def has_next(sent: int, max_messages: int) -> bool:
    """Tell whether another iteration should run (0 means unlimited)."""
    if max_messages == 0:
        return True
    return sent < max_messages


async def wait_for_stop(stop: asyncio.Event, timeout_sec: float) -> bool:
    """Wait until ``stop`` is set or ``timeout_sec`` elapses.

    Returns:
        True if stop was requested, False if the timeout elapsed first.
    """
    if stop.is_set():
        return True
    try:
        await asyncio.wait_for(stop.wait(), timeout=timeout_sec)
    except asyncio.TimeoutError:
        return False
    return True


async def probe_sink(settings: SenderSettingsPort, probe_fn: ProbeFn) -> None:
    """Block until the sink answers.

    Raises:
        ProbeTimeoutError: If the sink did not answer within the timeout.
    """
    timeout = settings.probe_sink_timeout_sec
    logger.info(f"Probing sink {settings.sink} for up to {timeout}s...")
    if not await probe_fn(settings.sink, timeout):
        raise ProbeTimeoutError(
            f"probing the sink '{settings.sink}' using timeout {timeout}s failed"
        )
    logger.info("Sink is reachable, starting to send")


async def _send_once(
    settings: SenderSettingsPort,
    vent: VentPort,
    send_fn: SendFn,
    message: BuiltMessage,
) -> None:
    response: ClientResponse | None = None
    error: BaseException | None = None
    try:
        response = await send_fn(message.request)
    except TRANSPORT_ERRORS as e:
        logger.warning(f"Sending to {settings.sink} failed: {e}")
        error = e

    await report(vent, sent_info(settings, message.sequence, message.event, message.request, error))

    if response is not None:
        info = await response_info(settings, message.sequence, response, message.event)
        await report(vent, info)


async def start_sender(
    settings: SenderSettingsPort,
    vent: VentPort,
    stop: asyncio.Event,
    send_fn: SendFn,
    probe_fn: ProbeFn,
) -> None:
    """Run the sender until the message count is reached or stop is set.

    Sequence:
    1. Build the template store and pick the encoder (fatal on bad config).
    2. Sleep for the start-up delay, unless stop is set meanwhile.
    3. Probe the sink if enabled.
    4. Loop: build, send, report the sent outcome and, unless the exchange
       failed, the response outcome; stop after ``max_messages`` iterations,
       otherwise wait for the next tick or for stop.

    Args:
        settings: Runtime configuration.
        vent: Observability sink for outcome records.
        stop: Cancellation signal.
        send_fn: Async function performing one HTTP exchange.
        probe_fn: Async function probing a URL within a timeout.

    Raises:
        ConfigurationError: Invalid template or encoding.
        ProbeTimeoutError: Sink never became reachable.
        EncodingError: An event could not be encoded.
        VentError: An outcome record could not be delivered.

    Notes:
        - Iterations never overlap; a failed exchange is recorded and the
          loop goes on.
        - Without a template event the sequence stays at 0, so the message
          count is tracked separately.
        - After an iteration slower than the period the next one starts right
          away, then the regular cadence resumes; missed ticks are not replayed.
    """
    template = EventTemplate.from_settings(settings)
    write_event = select_writer(settings.event_encoding)
    logger.info(f"Sender configuration: {settings}")

    if settings.delay_sec > 0:
        logger.info(f"Will sleep for {settings.delay_sec}s")
        if await wait_for_stop(stop, settings.delay_sec):
            logger.info("Canceled before sending because stop was requested")
            return
        logger.info("Awake, continuing")

    if stop.is_set():
        logger.info("Canceled before sending because stop was requested")
        return

    if settings.probe_sink:
        await probe_sink(settings, probe_fn)

    sequence = 0
    sent = 0
    next_tick: float = get_now_time()

    while True:
        message = build_message(template, settings, sequence, write_event)
        sequence = message.sequence

        await _send_once(settings, vent, send_fn, message)
        sent += 1

        if not has_next(sent, settings.max_messages):
            logger.info(f"Sent {sent} message(s), done")
            return

        next_tick += settings.period_sec
        now = get_now_time()
        if next_tick <= now and settings.period_sec > 0:
            # At most one missed tick stays pending, the rest are dropped.
            next_tick += (now - next_tick) // settings.period_sec * settings.period_sec
        if await wait_for_stop(stop, max(0.0, next_tick - now)):
            logger.info("Canceled sending messages because stop was requested")
            return
