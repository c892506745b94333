"""Healthcheck validator for container orchestration."""

import logging

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.logging.logging_config import configure_logs
from src.core.errors import ConfigurationError
from src.core.template import EventTemplate

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Required environment variables are set.
    - Configuration can be loaded successfully.
    - The configured input yields something to send.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        EventTemplate.from_settings(settings.to_port())
    except (RuntimeError, ValueError, ConfigurationError) as exc:
        logger.error(f"Sender healthcheck FAILED: {exc}")
        return 1

    logger.info("Sender healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
