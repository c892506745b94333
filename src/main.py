"""Application entrypoint."""

import asyncio
import logging
from contextlib import AsyncExitStack

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.http.client import HttpClient
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driven.metrics.http_metrics import Metrics
from src.adapters.driven.vent.http_vent import HttpVent
from src.adapters.driven.vent.log_vent import LogVent
from src.adapters.driving.signals import make_stop_event
from src.core.errors import SenderError
from src.core.event_loop import start_sender

__all__ = ["main", "make_vent", "run"]

logger = logging.getLogger(__name__)


def make_vent(vent_endpoint: str | None) -> HttpVent | LogVent:
    """Pick the observability sink: a recorder endpoint if set, the log otherwise."""
    if vent_endpoint:
        logger.info(f"Forwarding event info to {vent_endpoint}")
        return HttpVent(vent_endpoint)
    return LogVent()


async def main() -> int:
    """Start the event sender.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Open the HTTP client and the vent.
    4. Run the sender until done, a fatal error, or SIGTERM.

    Returns:
        Process exit code: 0 on completion or cancellation, 1 on failure.
    """
    configure_logs()
    logger.info("Starting event sender...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check SINK, EVENT_ENCODING, INPUT_EVENT and that at least one of "
            "INPUT_EVENT, INPUT_BODY or INPUT_HEADERS is set.",
            exc,
        )
        return 1

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = config.to_port()

    async with AsyncExitStack() as stack:
        http = await stack.enter_async_context(
            HttpClient(metrics=Metrics(), tracing=settings_port.add_tracing)
        )
        vent = await stack.enter_async_context(make_vent(config.vent_endpoint))

        try:
            await start_sender(
                settings=settings_port,
                vent=vent,
                stop=make_stop_event(),
                send_fn=http.send,
                probe_fn=http.probe,
            )
        except SenderError as e:
            logger.error(f"Event sender failed: {e}")
            return 1
        except Exception as e:
            logger.error(f"Unhandled exception in sender: {e}", exc_info=True)
            return 1

    logger.info("Event sender stopped.")
    return 0


def run() -> None:
    """Run the sender and exit with its exit code."""
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")


if __name__ == "__main__":
    run()
