"""Builds one outbound request per iteration."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from src.core.cloudevents import CloudEvent
from src.core.encoding import EventWriter
from src.core.template import EventTemplate
from src.ports.http import HttpPort
from src.ports.settings import SenderSettingsPort

__all__ = ["BuiltMessage", "build_message"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuiltMessage:
    """Result of one build step.

    Attributes:
        request: Request ready to be sent.
        event: Event encoded into the request, None without a template event.
        sequence: Sequence counter after this build.
    """

    request: HttpPort
    event: CloudEvent | None
    sequence: int


def build_message(
    template: EventTemplate,
    settings: SenderSettingsPort,
    sequence: int,
    write_event: EventWriter,
) -> BuiltMessage:
    """Build the next request to send.

    With a template event the event is cloned, the sequence is incremented
    by one and the configured overrides (sequence extension, incremental id,
    send time) are applied before encoding. Static headers are then added
    and a static body, if any, replaces the body.

    Args:
        template: Template store.
        settings: Runtime configuration.
        sequence: Sequence counter before this build.
        write_event: Encoder for the configured content mode.

    Returns:
        The built request, the event it carries and the new sequence.

    Raises:
        EncodingError: If the event cannot be written into the request.
    """
    request = HttpPort(method=settings.input_method, url=settings.sink)

    event = template.clone()
    if event is not None:
        sequence += 1
        if settings.add_sequence:
            event.set_extension("sequence", sequence)
        if settings.incremental_id:
            event.id = str(sequence)
        if settings.override_time:
            event.time = datetime.now(timezone.utc)

        logger.info(f"Going to send event #{sequence}:\n{event}")
        write_event(event, request)

    for key, value in template.headers.items():
        request.headers.add(key, value)

    if template.body is not None:
        request.body = template.body

    return BuiltMessage(request=request, event=event, sequence=sequence)
