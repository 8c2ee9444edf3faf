"""Request context middleware binding trace and client identity.

Each request gets a trace_id taken, in order, from:
1. the active OpenTelemetry span (W3C ``traceparent`` or a fresh root span)
2. an incoming ``X-Trace-ID`` header (student service forwarding its own id)
3. a generated UUIDv4 when tracing is disabled

The trace_id is bound into the structlog context, stored on
``request.state`` and echoed back in the ``X-Trace-ID`` response header.
The client IP is stored alongside it for logging and rate limiting.
"""

from collections.abc import Awaitable, Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware


TRACE_ID_HEADER = "X-Trace-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach trace_id and client_ip to every request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        span = trace.get_current_span()
        trace_id = extract_trace_id(request, span.get_span_context())
        client_ip = extract_client_ip(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            trace_id=trace_id,
            client_ip=client_ip,
            method=request.method,
            path=request.url.path,
        )

        request.state.trace_id = trace_id
        request.state.client_ip = client_ip

        if span.is_recording():
            span.set_attribute("client_ip", client_ip)

        response = await call_next(request)
        response.headers[TRACE_ID_HEADER] = trace_id
        return response


def extract_trace_id(request: Request, span_context: trace.SpanContext) -> str:
    """Return the trace id for ``request``, generating one if nothing upstream set it."""
    if span_context.is_valid:
        # 128-bit trace id as 32 hex chars
        return format(span_context.trace_id, "032x")

    if incoming := request.headers.get(TRACE_ID_HEADER):
        return incoming

    return uuid4().hex


def extract_client_ip(request: Request) -> str:
    """Return the originating client IP, honouring common proxy headers."""
    if forwarded_for := request.headers.get("X-Forwarded-For"):
        # "client, proxy1, proxy2"
        return forwarded_for.split(",")[0].strip()

    if real_ip := request.headers.get("X-Real-IP"):
        return real_ip

    if request.client and request.client.host:
        return request.client.host

    return "unknown"
