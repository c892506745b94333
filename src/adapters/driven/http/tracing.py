"""Tracing propagation headers for outbound requests."""

import secrets
from types import SimpleNamespace

import aiohttp
from multidict import CIMultiDict

__all__ = ["inject_propagation_headers", "make_trace_config"]

TRACEPARENT = "traceparent"


def inject_propagation_headers(headers: CIMultiDict[str]) -> None:
    """Add W3C trace context and B3 headers for a new sampled span.

    Requests already carrying a ``traceparent`` are left untouched.

    Args:
        headers: Mutable request headers.
    """
    if TRACEPARENT in headers:
        return
    trace_id = secrets.token_hex(16)
    span_id = secrets.token_hex(8)
    headers[TRACEPARENT] = f"00-{trace_id}-{span_id}-01"
    headers["X-B3-TraceId"] = trace_id
    headers["X-B3-SpanId"] = span_id
    headers["X-B3-Sampled"] = "1"


async def _on_request_start(
    session: aiohttp.ClientSession,
    trace_config_ctx: SimpleNamespace,
    params: aiohttp.TraceRequestStartParams,
) -> None:
    inject_propagation_headers(params.headers)


def make_trace_config() -> aiohttp.TraceConfig:
    """Create a trace config injecting propagation headers on every request."""
    trace_config = aiohttp.TraceConfig()
    trace_config.on_request_start.append(_on_request_start)
    return trace_config
