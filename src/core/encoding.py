"""CloudEvents HTTP protocol binding (binary and structured content modes)."""

from __future__ import annotations

import base64
import json
from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import quote, unquote

from src.core.cloudevents import CloudEvent, format_time
from src.core.errors import ConfigurationError, EncodingError
from src.ports.http import HttpPort
from src.ports.settings import EventEncoding

__all__ = [
    "BATCH_CONTENT_TYPE",
    "EventWriter",
    "MessageEncoding",
    "STRUCTURED_CONTENT_TYPE",
    "read_encoding",
    "select_writer",
    "to_event",
    "write_binary",
    "write_structured",
]

STRUCTURED_CONTENT_TYPE = "application/cloudevents+json"
BATCH_CONTENT_TYPE = "application/cloudevents-batch+json"
JSON_CONTENT_TYPE = "application/json"

_HEADER_PREFIX = "ce-"
# Printable ASCII minus '"' and '%' travels unescaped in header values.
_HEADER_SAFE = "".join(chr(c) for c in range(0x20, 0x7F) if chr(c) not in '"%')

EventWriter = Callable[[CloudEvent, HttpPort], None]


class MessageEncoding(Enum):
    """Content mode detected on an incoming HTTP message."""

    UNKNOWN = "unknown"
    BINARY = "binary"
    STRUCTURED = "structured"
    BATCH = "batch"


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _is_json(content_type: str | None) -> bool:
    media = _media_type(content_type)
    return media in ("", JSON_CONTENT_TYPE, "text/json") or media.endswith("+json")


def _render_attribute(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, str)):
        return str(value)
    if isinstance(value, datetime):
        return format_time(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise EncodingError(f"cannot encode attribute {name!r} of type {type(value).__name__}")


def _encode_data(event: CloudEvent) -> bytes | None:
    data = event.data
    if data is None:
        return None
    if isinstance(data, bytes):
        return data
    if isinstance(data, str) and not _is_json(event.datacontenttype):
        return data.encode()
    try:
        return json.dumps(data).encode()
    except (TypeError, ValueError) as e:
        raise EncodingError(f"cannot encode data of event {event.id!r}: {e}") from e


def write_binary(event: CloudEvent, request: HttpPort) -> None:
    """Write the event in binary content mode.

    Context attributes and extensions become ``ce-`` headers, the data
    becomes the request body.

    Raises:
        EncodingError: If an attribute or the data cannot be encoded.
    """
    attributes = event.to_dict()
    headers: dict[str, str] = {}
    for name in ("specversion", "id", "source", "type", "time", "subject", "dataschema"):
        if name in attributes:
            headers[_HEADER_PREFIX + name] = attributes[name]
    for name, value in event.extensions.items():
        headers[_HEADER_PREFIX + name] = _render_attribute(name, value)

    body = _encode_data(event)

    for key, value in headers.items():
        request.headers[key] = quote(value, safe=_HEADER_SAFE)
    if event.datacontenttype:
        request.headers["Content-Type"] = event.datacontenttype
    elif body is not None and not isinstance(event.data, bytes):
        request.headers["Content-Type"] = JSON_CONTENT_TYPE
    request.body = body


def write_structured(event: CloudEvent, request: HttpPort) -> None:
    """Write the whole event as a JSON envelope in the request body.

    Raises:
        EncodingError: If the event cannot be serialized.
    """
    for name, value in event.extensions.items():
        _render_attribute(name, value)
    try:
        body = json.dumps(event.to_dict()).encode()
    except (TypeError, ValueError) as e:
        raise EncodingError(f"cannot encode event {event.id!r}: {e}") from e
    request.headers["Content-Type"] = STRUCTURED_CONTENT_TYPE
    request.body = body


_WRITERS: dict[EventEncoding, EventWriter] = {
    EventEncoding.BINARY: write_binary,
    EventEncoding.STRUCTURED: write_structured,
}


def select_writer(mode: EventEncoding | str) -> EventWriter:
    """Resolve an encoding mode to its writer.

    Raises:
        ConfigurationError: If the mode is not supported.
    """
    try:
        encoding = EventEncoding(mode.lower() if isinstance(mode, str) else mode)
    except ValueError as e:
        raise ConfigurationError(f"unsupported encoding option: {mode!r}") from e
    return _WRITERS[encoding]


def read_encoding(headers: Mapping[str, str]) -> MessageEncoding:
    """Detect the content mode of a message from its headers.

    Args:
        headers: Case-insensitive headers of the message.
    """
    media = _media_type(headers.get("Content-Type"))
    if media == STRUCTURED_CONTENT_TYPE:
        return MessageEncoding.STRUCTURED
    if media == BATCH_CONTENT_TYPE:
        return MessageEncoding.BATCH
    if headers.get(_HEADER_PREFIX + "specversion"):
        return MessageEncoding.BINARY
    return MessageEncoding.UNKNOWN


def _binary_to_event(headers: Mapping[str, str], body: bytes) -> CloudEvent:
    fields: dict[str, Any] = {}
    extensions: dict[str, Any] = {}
    for key, value in headers.items():
        name = key.lower()
        if not name.startswith(_HEADER_PREFIX):
            continue
        name = name[len(_HEADER_PREFIX) :]
        if name in fields or name in extensions:
            continue
        if name in ("specversion", "id", "source", "type", "time", "subject", "dataschema"):
            fields[name] = unquote(value)
        else:
            extensions[name] = unquote(value)

    content_type = headers.get("Content-Type")
    if content_type:
        fields["datacontenttype"] = content_type
    if body:
        if _is_json(content_type):
            try:
                fields["data"] = json.loads(body)
            except json.JSONDecodeError as e:
                raise ValueError(f"invalid JSON data: {e}") from e
        else:
            fields["data"] = body
    return CloudEvent(**fields, extensions=extensions)


def to_event(encoding: MessageEncoding, headers: Mapping[str, str], body: bytes) -> CloudEvent:
    """Decode a binary or structured message into an event.

    Raises:
        ValueError: If the message is a batch, is not a CloudEvent, or is
            malformed.
    """
    if encoding is MessageEncoding.STRUCTURED:
        return CloudEvent.from_json(body)
    if encoding is MessageEncoding.BINARY:
        return _binary_to_event(headers, body)
    if encoding is MessageEncoding.BATCH:
        raise ValueError("batch messages cannot be read as a single event")
    raise ValueError("message is not a CloudEvent")
