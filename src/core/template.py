"""Event template store built once from configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.cloudevents import CloudEvent
from src.core.errors import ConfigurationError
from src.ports.settings import SenderSettingsPort

__all__ = ["EventTemplate"]


@dataclass(frozen=True)
class EventTemplate:
    """What every iteration sends: a base event and/or static overrides.

    The base event is never handed out directly; callers get a clone.

    Attributes:
        base_event: Parsed base CloudEvent, if one was configured.
        headers: Static headers added to every request.
        body: Static body replacing any encoded event body.
    """

    base_event: CloudEvent | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @classmethod
    def from_settings(cls, settings: SenderSettingsPort) -> EventTemplate:
        """Build the template store from validated settings.

        Raises:
            ConfigurationError: If the base event cannot be parsed, or if no
                event, body or headers were configured.
        """
        base_event = None
        if settings.input_event:
            try:
                base_event = CloudEvent.from_json(settings.input_event)
            except ValueError as e:
                raise ConfigurationError(f"unable to unmarshal the event from json: {e}") from e

        if not settings.input_event and not settings.input_body and not settings.input_headers:
            raise ConfigurationError(
                "input values not provided: set at least one of INPUT_EVENT, "
                "INPUT_BODY or INPUT_HEADERS"
            )

        return cls(
            base_event=base_event,
            headers=dict(settings.input_headers),
            body=settings.input_body.encode() if settings.input_body else None,
        )

    def clone(self) -> CloudEvent | None:
        """Return a fresh copy of the base event, or None without one."""
        if self.base_event is None:
            return None
        return self.base_event.clone()
