"""Console logging setup for the sender."""

import logging
import os

__all__ = ["configure_logs"]

HANDLER_NAME = "sender-console"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"
QUIET_LOGGERS = ("aiohttp", "asyncio")


def configure_logs(level: str | None = None) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at ``level``, else LOG_LEVEL, else INFO.
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (src) at DEBUG level, outcome records included.
    - One console handler, even when called again (healthcheck, then main).

    Args:
        level: Root level name overriding LOG_LEVEL.
    """
    root = logging.getLogger()
    root.setLevel((level or os.getenv("LOG_LEVEL") or "INFO").upper())

    if not any(h.get_name() == HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("src").setLevel(logging.DEBUG)
