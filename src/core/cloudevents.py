"""CloudEvents 1.0 event model and JSON event format."""

from __future__ import annotations

import base64
import json
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "CONTEXT_ATTRIBUTES",
    "SUPPORTED_VERSIONS",
    "CloudEvent",
    "format_time",
    "validate_extension_name",
]

CONTEXT_ATTRIBUTES = (
    "specversion",
    "id",
    "source",
    "type",
    "time",
    "subject",
    "datacontenttype",
    "dataschema",
)

_EXTENSION_NAME = re.compile(r"^[a-z0-9]+$")
_EXTENSION_TYPES = (str, bool, int, bytes, datetime)
SUPPORTED_VERSIONS = ("1.0", "0.3")


def format_time(value: datetime) -> str:
    """Render a timestamp as RFC 3339, naive values taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def validate_extension_name(name: str) -> str:
    """Check an extension name against the CloudEvents naming rules.

    Raises:
        ValueError: If the name is not lowercase alphanumeric or shadows
            a context attribute.
    """
    if not _EXTENSION_NAME.match(name):
        raise ValueError(f"invalid extension name {name!r}: must be lowercase alphanumeric")
    if name in CONTEXT_ATTRIBUTES or name in ("data", "data_base64"):
        raise ValueError(f"invalid extension name {name!r}: reserved attribute")
    return name


class CloudEvent(BaseModel):
    """A CloudEvent: context attributes, extensions and data.

    ``data`` holds any JSON value, or ``bytes`` when the event carried
    binary data (``data_base64`` or a non-JSON binary-mode body).
    """

    model_config = ConfigDict(validate_assignment=True)

    specversion: str = "1.0"
    id: str = ""
    source: str = ""
    type: str = ""
    time: datetime | None = None
    subject: str | None = None
    datacontenttype: str | None = None
    dataschema: str | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)
    data: Any = None

    @field_validator("specversion")
    @classmethod
    def validate_specversion(cls, v: str) -> str:
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported specversion {v!r}")
        return v

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Validate extension names and value types.

        Raises:
            ValueError: On a bad name or a value that is not a string,
                boolean, integer, bytes or timestamp.
        """
        for name, value in v.items():
            validate_extension_name(name)
            if not isinstance(value, _EXTENSION_TYPES):
                raise ValueError(
                    f"invalid value for extension {name!r}: "
                    f"unsupported type {type(value).__name__}"
                )
        return v

    @classmethod
    def from_json(cls, text: str | bytes) -> CloudEvent:
        """Parse an event in the JSON event format.

        Raises:
            ValueError: If the text is not a valid JSON event.
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("event must be a JSON object")
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CloudEvent:
        """Build an event from a decoded JSON event format object."""
        fields: dict[str, Any] = {}
        extensions: dict[str, Any] = {}
        for key, value in raw.items():
            if key in CONTEXT_ATTRIBUTES or key == "data":
                fields[key] = value
            elif key == "data_base64":
                if not isinstance(value, str):
                    raise ValueError("data_base64 must be a string")
                fields["data"] = base64.b64decode(value, validate=True)
            else:
                extensions[key] = value
        return cls(**fields, extensions=extensions)

    def clone(self) -> CloudEvent:
        """Return an independent deep copy of this event."""
        return self.model_copy(deep=True)

    def set_extension(self, name: str, value: Any) -> None:
        """Set one extension attribute, validating its name and type."""
        self.extensions = {**self.extensions, name: value}

    def to_dict(self) -> dict[str, Any]:
        """Render the event in the JSON event format."""
        out: dict[str, Any] = {
            "specversion": self.specversion,
            "id": self.id,
            "source": self.source,
            "type": self.type,
        }
        if self.time is not None:
            out["time"] = format_time(self.time)
        for name in ("subject", "datacontenttype", "dataschema"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        for name, value in self.extensions.items():
            if isinstance(value, datetime):
                value = format_time(value)
            elif isinstance(value, bytes):
                value = base64.b64encode(value).decode("ascii")
            out[name] = value
        if isinstance(self.data, bytes):
            out["data_base64"] = base64.b64encode(self.data).decode("ascii")
        elif self.data is not None:
            out["data"] = self.data
        return out

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)
