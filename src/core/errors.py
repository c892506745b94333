"""Fatal error taxonomy of the sender."""

__all__ = [
    "ConfigurationError",
    "EncodingError",
    "ProbeTimeoutError",
    "SenderError",
    "VentError",
]


class SenderError(Exception):
    """Base class for errors that abort a sender run."""


class ConfigurationError(SenderError):
    """Configuration cannot produce anything to send."""


class ProbeTimeoutError(SenderError):
    """Sink did not become reachable within the probe timeout."""


class EncodingError(SenderError):
    """Templated event could not be written into the outbound request."""


class VentError(SenderError):
    """Outcome record could not be delivered to the observability sink."""
