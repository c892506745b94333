"""Outcome record port definition (DTO)."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.core.cloudevents import CloudEvent

__all__ = ["EventInfo", "EventKind"]


class EventKind(str, Enum):
    """Kind of outcome record."""

    SENT = "Sent"
    RESPONSE = "Response"


@dataclass(slots=True)
class EventInfo:
    """Snapshot of one transmission attempt or of its response.

    Attributes:
        kind: Whether this describes the request or the response.
        origin: Who produced the observed message.
        observer: Who recorded it (always the sender).
        time: Wall-clock time the record was created.
        sequence: Sequence counter value at the time of the iteration.
        event: CloudEvent sent or received, if any.
        http_headers: Headers of the request or response.
        body: Raw body, when it was not captured as an event.
        status_code: Response status code.
        error: Error message for a failed send or unreadable response.
        sent_id: Id of the event sent in this iteration.
    """

    kind: EventKind
    origin: str
    observer: str
    time: datetime
    sequence: int
    event: CloudEvent | None = None
    http_headers: dict[str, list[str]] | None = None
    body: bytes | None = None
    status_code: int | None = None
    error: str | None = None
    sent_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the record as a JSON-ready mapping.

        Returns:
            Mapping with empty fields omitted and the body base64-encoded.
        """
        out: dict[str, Any] = {
            "kind": self.kind.value,
            "origin": self.origin,
            "observer": self.observer,
            "time": self.time.isoformat(),
            "sequence": self.sequence,
        }
        if self.event is not None:
            out["event"] = self.event.to_dict()
        if self.http_headers is not None:
            out["headers"] = self.http_headers
        if self.body is not None:
            out["body"] = base64.b64encode(self.body).decode("ascii")
        if self.status_code is not None:
            out["statusCode"] = self.status_code
        if self.error:
            out["error"] = self.error
        if self.sent_id:
            out["sentId"] = self.sent_id
        return out
