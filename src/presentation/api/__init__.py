"""FastAPI application factory and configuration.

One codebase serves both processes; ``SERVICE_ROLE`` selects which routes are
mounted:

* ``address``: address lookups and the flaky resource, backed by local data
* ``student``: student-facing lookups that call the address service through
  circuit breaker, bulkhead and retry policies
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from src.container import Container
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.logging.config import configure_logging, get_logger
from src.infrastructure.telemetry import configure_opentelemetry, instrument_fastapi
from src.presentation.api.middleware.error_handling import setup_exception_handlers
from src.presentation.api.middleware.logging import LoggingMiddleware
from src.presentation.api.middleware.rate_limiting import setup_rate_limiting
from src.presentation.api.middleware.request_context import RequestContextMiddleware
from src.presentation.api.v1 import address_router, student_router


logger = get_logger(__name__)

# Endpoint modules using @inject, per service role
WIRED_MODULES = {
    "address": [
        "src.presentation.api.v1.endpoints.addresses",
        "src.presentation.api.v1.endpoints.flaky",
    ],
    "student": ["src.presentation.api.v1.endpoints.students"],
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan events."""
    container: Container = app.state.container
    settings: Settings = container.config()
    logger.info(
        "application_startup",
        app_name=app.title,
        version=app.version,
        role=settings.service_role,
    )

    if settings.service_role == "student":
        # Build the policies up front so /health reports them before the first lookup
        container.address_proxy_service()
        container.flaky_service()
        logger.info("address_service_client_ready", base_url=settings.address_service_url)

    yield

    if settings.service_role == "student":
        await container.http_client().aclose()
        logger.info("address_service_client_closed")

    logger.info("application_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Explicit settings, defaulting to the cached environment settings

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    # Configure OpenTelemetry (before logging)
    configure_opentelemetry(settings)

    # Configure logging (with trace context)
    configure_logging(settings)

    # Create and wire dependency injection container
    container = Container()
    container.config.override(settings)
    container.wire(modules=WIRED_MODULES[settings.service_role])

    router: APIRouter
    if settings.service_role == "address":
        router = address_router
        tags_metadata = [
            {"name": "address", "description": "Address lookups by id."},
            {"name": "flaky", "description": "Resource that fails at a configured rate."},
        ]
        description = "Address lookup service."
    else:
        router = student_router
        tags_metadata = [
            {
                "name": "student",
                "description": """
Student-facing lookups resolved through the address service.

Address lookups run behind a shared circuit breaker and a per-route bulkhead.
Flaky resource lookups are retried with exponential backoff.
                """,
            },
        ]
        description = "Student service calling the address service with resilience policies."
    tags_metadata.append({"name": "health", "description": "Health check and monitoring."})

    app = FastAPI(
        title=f"{settings.app_name}-{settings.service_role}",
        version=settings.app_version,
        description=description,
        openapi_tags=tags_metadata,
        docs_url=settings.docs_url,
        openapi_url=settings.openapi_url,
        lifespan=lifespan,
    )

    # Store container in app state for access from lifespan and health checks
    app.state.container = container

    # Instrument FastAPI with OpenTelemetry
    if settings.otel_enabled:
        instrument_fastapi(app)

    # Setup exception handlers
    setup_exception_handlers(app)

    # Setup middleware (last added runs first, request context must wrap logging)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)
    setup_rate_limiting(app, settings)

    # Include routers
    app.include_router(router, prefix=settings.api_v1_prefix)

    return app
