"""Tests for building outbound requests."""

import json
from datetime import datetime, timezone

import pytest

from src.core.builder import build_message
from src.core.cloudevents import CloudEvent
from src.core.encoding import read_encoding, to_event, write_binary, write_structured
from src.core.errors import EncodingError
from src.core.template import EventTemplate
from src.ports.settings import SenderSettingsPort

__all__ = []

SINK = "http://sink.test/events"


def make_event() -> CloudEvent:
    """Create the base event used across tests."""
    return CloudEvent(
        id="a",
        source="/tests",
        type="dev.test.created",
        extensions={"tenant": "blue"},
        data={"hello": "world"},
    )


def test_build_binary_request() -> None:
    """Binary mode should put attributes in headers and data in the body."""
    template = EventTemplate(base_event=make_event())
    settings = SenderSettingsPort(sink=SINK, add_sequence=True)

    message = build_message(template, settings, 0, write_binary)

    assert message.sequence == 1
    assert message.request.method == "POST"
    assert message.request.url == SINK
    headers = message.request.headers
    assert headers["ce-id"] == "a"
    assert headers["ce-type"] == "dev.test.created"
    assert headers["ce-tenant"] == "blue"
    assert headers["ce-sequence"] == "1"
    assert headers["Content-Type"] == "application/json"
    assert json.loads(message.request.body) == {"hello": "world"}


def test_build_structured_request() -> None:
    """Structured mode should serialize the whole event as the body."""
    template = EventTemplate(base_event=make_event())
    settings = SenderSettingsPort(sink=SINK, input_method="PUT")

    message = build_message(template, settings, 4, write_structured)

    assert message.sequence == 5
    assert message.request.method == "PUT"
    assert message.request.headers["Content-Type"] == "application/cloudevents+json"
    body = json.loads(message.request.body)
    assert body["id"] == "a"
    assert body["tenant"] == "blue"
    assert body["data"] == {"hello": "world"}
    assert "ce-id" not in message.request.headers


def test_build_applies_id_and_time_overrides() -> None:
    """Incremental id and time override should change the clone only."""
    template = EventTemplate(base_event=make_event())
    settings = SenderSettingsPort(sink=SINK, incremental_id=True, override_time=True)
    before = datetime.now(timezone.utc)

    message = build_message(template, settings, 41, write_binary)

    assert message.event.id == "42"
    assert message.event.time >= before
    assert message.request.headers["ce-id"] == "42"
    assert template.base_event.id == "a"
    assert template.base_event.time is None


def test_build_never_mutates_template() -> None:
    """Overrides should not leak into the template event."""
    template = EventTemplate(base_event=make_event())
    settings = SenderSettingsPort(sink=SINK, add_sequence=True)

    first = build_message(template, settings, 0, write_binary)
    second = build_message(template, settings, first.sequence, write_binary)

    assert first.event.extensions["sequence"] == 1
    assert second.event.extensions["sequence"] == 2
    assert template.base_event.extensions == {"tenant": "blue"}


def test_build_without_template_event() -> None:
    """Without an event only static headers and body are sent."""
    template = EventTemplate(headers={"X-Token": "t"}, body=b"raw")
    settings = SenderSettingsPort(sink=SINK)

    message = build_message(template, settings, 3, write_binary)

    assert message.event is None
    assert message.sequence == 3
    assert message.request.headers["X-Token"] == "t"
    assert message.request.body == b"raw"


def test_build_static_body_replaces_event_body() -> None:
    """Static body should win over the encoded event data."""
    template = EventTemplate(base_event=make_event(), body=b"override")
    settings = SenderSettingsPort(sink=SINK)

    message = build_message(template, settings, 0, write_binary)

    assert message.request.body == b"override"
    assert message.request.headers["ce-id"] == "a"


def test_build_static_headers_are_added() -> None:
    """Static headers should be added next to same-named encoded headers."""
    template = EventTemplate(base_event=make_event(), headers={"Content-Type": "text/plain"})
    settings = SenderSettingsPort(sink=SINK)

    message = build_message(template, settings, 0, write_binary)

    assert message.request.headers.getall("Content-Type") == ["application/json", "text/plain"]


def test_build_binary_request_decodes_back() -> None:
    """Decoding a binary request should give back the built event."""
    template = EventTemplate(base_event=make_event())
    settings = SenderSettingsPort(sink=SINK, add_sequence=True)

    message = build_message(template, settings, 0, write_binary)
    headers = message.request.headers
    decoded = to_event(read_encoding(headers), headers, message.request.body)

    assert decoded.id == message.event.id
    assert decoded.type == message.event.type
    assert decoded.source == message.event.source
    assert decoded.extensions == {"tenant": "blue", "sequence": "1"}
    assert decoded.data == {"hello": "world"}


def test_build_raises_on_unencodable_event() -> None:
    """Data that cannot be serialized should raise EncodingError."""
    template = EventTemplate(base_event=CloudEvent(id="a", type="t", data={1, 2}))
    settings = SenderSettingsPort(sink=SINK)

    with pytest.raises(EncodingError, match="cannot encode data"):
        build_message(template, settings, 0, write_binary)
