"""OpenTelemetry instrumentation configuration and explicit span helpers."""

import functools
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio
from opentelemetry.util.types import AttributeValue

from src.infrastructure.config import Settings


def configure_opentelemetry(settings: Settings) -> None:
    """Configure OpenTelemetry instrumentation."""
    if not settings.otel_enabled:
        return

    resource = Resource.create(
        {
            "service.name": f"{settings.otel_service_name}-{settings.service_role}",
            "service.version": settings.app_version,
            "deployment.environment": settings.app_env,
        }
    )

    trace_provider = TracerProvider(
        resource=resource,
        sampler=ParentBasedTraceIdRatio(settings.otel_trace_sample_rate),
    )
    otlp_exporter = OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint,
        insecure=settings.otel_exporter_otlp_insecure,
    )
    trace_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    trace.set_tracer_provider(trace_provider)

    # Propagates W3C Trace Context headers on calls to the address service
    HTTPXClientInstrumentor().instrument()


def instrument_fastapi(app: Any) -> None:
    """Instrument FastAPI application with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)


@contextmanager
def observation(
    contextual_name: str,
    name: str | None = None,
    low_cardinality: dict[str, AttributeValue] | None = None,
    **attributes: AttributeValue,
) -> Iterator[trace.Span]:
    """Open a span around a call boundary.

    Low-cardinality key values describe the kind of call (safe for metrics
    aggregation); extra keyword attributes describe this particular call.
    Exceptions are recorded on the span and re-raised.

    Args:
        contextual_name: Span name, e.g. ``address-->database``
        name: Observation name stored as ``observation.name``
        low_cardinality: Attributes with a small, fixed value set
        attributes: Per-call attributes such as identifiers

    Yields:
        The active span, for attaching attributes discovered during the call
    """
    span_attributes: dict[str, AttributeValue] = {"observation.name": name or contextual_name}
    span_attributes.update(low_cardinality or {})
    span_attributes.update(attributes)
    tracer = get_tracer(__name__)
    with tracer.start_as_current_span(contextual_name, attributes=span_attributes) as span:
        yield span


def observed[**P, T](
    contextual_name: str,
    name: str | None = None,
    low_cardinality: dict[str, AttributeValue] | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator form of ``observation`` for async callables."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with observation(contextual_name, name=name, low_cardinality=low_cardinality):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
