"""Configuration loading from environment variables."""

import logging
import os
import re
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from src.ports.settings import EventEncoding, SenderSettingsPort

__all__ = ["ENV_VARS", "Settings", "load_settings", "parse_headers"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)
_METHOD = re.compile(r"^[A-Za-z]+$")

# Environment variable -> Settings field
ENV_VARS = {
    "POD_NAME": "sender_name",
    "SINK": "sink",
    "DELAY": "delay_sec",
    "PROBE_SINK": "probe_sink",
    "PROBE_SINK_TIMEOUT": "probe_sink_timeout_sec",
    "INPUT_EVENT": "input_event",
    "EVENT_ENCODING": "event_encoding",
    "INPUT_HEADERS": "input_headers",
    "INPUT_BODY": "input_body",
    "INPUT_METHOD": "input_method",
    "ADD_TRACING": "add_tracing",
    "ADD_SEQUENCE": "add_sequence",
    "INCREMENTAL_ID": "incremental_id",
    "OVERRIDE_TIME": "override_time",
    "PERIOD": "period_sec",
    "MAX_MESSAGES": "max_messages",
    "VENT_ENDPOINT": "vent_endpoint",
}


def parse_headers(raw: str) -> dict[str, str]:
    """Parse a ``key1:value1,key2:value2`` header list.

    Raises:
        ValueError: If an entry has no ``:`` separator or an empty key.
    """
    headers: dict[str, str] = {}
    for entry in raw.split(","):
        if not entry.strip():
            continue
        key, sep, value = entry.partition(":")
        if not sep or not key.strip():
            raise ValueError(f"invalid header entry {entry!r}, expected key:value")
        headers[key.strip()] = value.strip()
    return headers


def _validate_url(v: str, what: str) -> str:
    try:
        url = _http_url_adapter.validate_python(v)
        if url.scheme not in ("http", "https"):
            raise ValueError("Only http:// and https:// endpoints allowed")
    except Exception as e:
        raise ValueError(f"Invalid {what}: {e}") from e
    return v


class Settings(BaseModel):
    """Runtime configuration for the sender.

    Attributes:
        sender_name: Identity reported as origin/observer of outcome records.
        sink: HTTP(S) endpoint that will receive events.
        delay_sec: Seconds to wait before starting.
        probe_sink: Probe the sink until it answers before sending.
        probe_sink_timeout_sec: Maximum seconds to wait for the probe.
        input_event: Base CloudEvent as JSON.
        event_encoding: binary or structured content mode.
        input_headers: Headers added to every request.
        input_body: Body overriding any event data.
        input_method: HTTP method.
        add_tracing: Inject tracing propagation headers.
        add_sequence: Add the ``sequence`` extension.
        incremental_id: Replace the event id with the sequence number.
        override_time: Replace the event time with the send time.
        period_sec: Seconds between messages.
        max_messages: Messages to send, 0 for unlimited.
        vent_endpoint: Optional recorder receiving outcome records over HTTP.
    """

    sender_name: str = Field(default="sender-default", min_length=1)
    sink: str = Field(..., description="HTTP endpoint that will receive events.")
    delay_sec: int = Field(default=5, ge=0)
    probe_sink: bool = True
    probe_sink_timeout_sec: int = Field(default=60, ge=0)
    input_event: str | None = None
    event_encoding: EventEncoding = EventEncoding.BINARY
    input_headers: dict[str, str] = Field(default_factory=dict)
    input_body: str | None = None
    input_method: str = "POST"
    add_tracing: bool = False
    add_sequence: bool = False
    incremental_id: bool = False
    override_time: bool = False
    period_sec: int = Field(default=5, ge=0)
    max_messages: int = Field(default=1, ge=0)
    vent_endpoint: str | None = Field(
        default=None,
        description="Optional recorder endpoint; outcome records are logged when not set.",
    )

    @field_validator("sink")
    @classmethod
    def validate_sink(cls, v: str) -> str:
        """Validate that the sink is a valid HTTP(S) URL.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        return _validate_url(v, "sink")

    @field_validator("vent_endpoint")
    @classmethod
    def validate_vent_endpoint(cls, v: str | None) -> str | None:
        """Validate that the vent endpoint (if provided) is a valid HTTP(S) URL."""
        if v is None:
            return v
        return _validate_url(v, "vent endpoint")

    @field_validator("event_encoding", mode="before")
    @classmethod
    def validate_event_encoding(cls, v: Any) -> Any:
        """Accept the encoding case-insensitively.

        Raises:
            ValueError: If the encoding is neither binary nor structured.
        """
        if isinstance(v, str):
            try:
                return EventEncoding(v.strip().lower())
            except ValueError as e:
                raise ValueError(f"unsupported encoding option: {v!r}") from e
        return v

    @field_validator("input_headers", mode="before")
    @classmethod
    def validate_input_headers(cls, v: Any) -> Any:
        """Accept headers as a ``key:value,...`` string."""
        if isinstance(v, str):
            return parse_headers(v)
        return v

    @field_validator("input_method")
    @classmethod
    def validate_input_method(cls, v: str) -> str:
        """Validate that the method is a plain HTTP token."""
        v = v.strip()
        if not _METHOD.match(v):
            raise ValueError(f"invalid HTTP method: {v!r}")
        return v

    def to_port(self) -> SenderSettingsPort:
        """Wrap settings into the port consumed by the core."""
        return SenderSettingsPort(
            sink=self.sink,
            sender_name=self.sender_name,
            delay_sec=self.delay_sec,
            probe_sink=self.probe_sink,
            probe_sink_timeout_sec=self.probe_sink_timeout_sec,
            input_event=self.input_event,
            event_encoding=self.event_encoding,
            input_headers=dict(self.input_headers),
            input_body=self.input_body,
            input_method=self.input_method,
            add_tracing=self.add_tracing,
            add_sequence=self.add_sequence,
            incremental_id=self.incremental_id,
            override_time=self.override_time,
            period_sec=self.period_sec,
            max_messages=self.max_messages,
        )


def load_settings() -> Settings:
    """Load and validate settings from the environment.

    Required environment variables:
    - SINK: Valid HTTP(S) URL receiving the events.

    Optional: every other key of ENV_VARS. Empty values count as unset.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If SINK is missing.
        ValueError: If configuration is invalid.
    """
    raw: dict[str, str] = {}
    for env_name, field_name in ENV_VARS.items():
        value = os.getenv(env_name)
        if value:
            raw[field_name] = value

    if "sink" not in raw:
        raise RuntimeError("Missing required environment variable: SINK")

    settings = Settings(**raw)

    probe = f"{settings.probe_sink_timeout_sec}s" if settings.probe_sink else "<disabled>"
    logger.info(
        f"Sender configured: sink={settings.sink}, "
        f"encoding={settings.event_encoding.value}, "
        f"period={settings.period_sec}s, "
        f"max_messages={settings.max_messages or '<unlimited>'}, "
        f"probe={probe}"
    )

    return settings
