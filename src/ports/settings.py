"""Settings port definition (DTO)."""

from dataclasses import dataclass, field
from enum import Enum

__all__ = ["EventEncoding", "SenderSettingsPort"]


class EventEncoding(str, Enum):
    """CloudEvents HTTP content mode used for outbound events."""

    BINARY = "binary"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class SenderSettingsPort:
    """Runtime settings for the sender core.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        sink: URL every event is sent to.
        sender_name: Identity used as origin/observer of outcome records.
        delay_sec: Seconds to wait before doing anything else.
        probe_sink: Whether to probe the sink before sending.
        probe_sink_timeout_sec: Upper bound for the probe phase.
        input_event: Base CloudEvent serialized as JSON.
        event_encoding: Content mode for the templated event.
        input_headers: Headers added to every request after encoding.
        input_body: Body that replaces any encoded event body.
        input_method: HTTP method of every request.
        add_tracing: Inject tracing propagation headers.
        add_sequence: Set the ``sequence`` extension on each event.
        incremental_id: Override the event id with the sequence number.
        override_time: Override the event time with the send time.
        period_sec: Seconds between iterations.
        max_messages: Number of iterations to run, 0 for unlimited.
    """

    sink: str
    sender_name: str = "sender-default"
    delay_sec: float = 0
    probe_sink: bool = True
    probe_sink_timeout_sec: float = 60
    input_event: str | None = None
    event_encoding: EventEncoding = EventEncoding.BINARY
    input_headers: dict[str, str] = field(default_factory=dict)
    input_body: str | None = None
    input_method: str = "POST"
    add_tracing: bool = False
    add_sequence: bool = False
    incremental_id: bool = False
    override_time: bool = False
    period_sec: float = 5
    max_messages: int = 1
