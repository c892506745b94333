"""Vent port definition (interface)."""

from __future__ import annotations

from typing import Protocol

from src.ports.event_info import EventInfo

__all__ = ["VentPort"]


class VentPort(Protocol):
    """Interface for the observability sink receiving outcome records.

    Implementations accept one record at a time and must not block
    indefinitely. The sender treats a delivery failure as fatal.
    """

    async def vent(self, info: EventInfo, /) -> None:
        """Deliver one outcome record.

        Args:
            info: The record to deliver.

        Raises:
            VentError: If the record could not be delivered.
        """
        ...
