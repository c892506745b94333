"""Vent writing outcome records to the log."""

import json
import logging
from types import TracebackType

from src.core.errors import VentError
from src.ports.event_info import EventInfo
from src.ports.vent import VentPort

__all__ = ["LogVent"]

VENT_LOGGER = "src.vent"


class LogVent(VentPort):
    """Emit every outcome record as one JSON line on a dedicated logger."""

    def __init__(self, logger_name: str = VENT_LOGGER) -> None:
        self._logger = logging.getLogger(logger_name)

    async def __aenter__(self) -> "LogVent":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass

    async def vent(self, info: EventInfo) -> None:
        """Log one record.

        Raises:
            VentError: If the record cannot be serialized.
        """
        try:
            line = json.dumps(info.to_dict())
        except (TypeError, ValueError) as e:
            raise VentError(f"cannot serialize {info.kind.value} event info: {e}") from e
        self._logger.info(line)
