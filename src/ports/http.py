"""HTTP port definition (DTO)."""

from dataclasses import dataclass, field

from multidict import CIMultiDict

__all__ = ["HttpPort"]


@dataclass
class HttpPort:
    """HTTP request to be sent to the sink.

    Decouples message building from HTTP implementation details.

    Attributes:
        method: HTTP method.
        url: Target HTTP endpoint URL.
        headers: Case-insensitive headers; the same name may appear twice.
        body: Raw request body, None for an empty body.
    """

    method: str
    url: str
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: bytes | None = None
