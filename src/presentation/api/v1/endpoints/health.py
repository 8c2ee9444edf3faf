"""Health check endpoints for monitoring and orchestration.

The student service additionally reports the state of its circuit breakers
and bulkheads, which is the quickest way to see why lookups are failing fast.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from src.infrastructure.config import Settings


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    role: str
    circuit_breakers: dict[str, dict[str, Any]] | None = Field(default=None)
    bulkheads: dict[str, dict[str, Any]] | None = Field(default=None)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "healthy",
                    "version": "0.1.0",
                    "environment": "production",
                    "role": "student",
                    "circuit_breakers": {
                        "address-service": {
                            "state": "closed",
                            "fail_counter": 0,
                            "fail_max": 5,
                            "success_counter": 0,
                        }
                    },
                    "bulkheads": {
                        "address": {"max_concurrent_calls": 10, "in_flight": 0, "rejected": 0}
                    },
                }
            ]
        }
    }


def get_app_settings(request: Request) -> Settings:
    """Settings of the running app, which may differ from the cached defaults in tests."""
    return request.app.state.container.config()  # type: ignore[no-any-return]


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="""
Check that the service is up.

On the student service the response also includes the circuit breaker and
bulkhead snapshots. An open breaker does not make the service unhealthy; it
only means lookups currently fail fast.
    """,
)
async def health_check(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """Report service status and, for the student role, resilience state."""
    response = HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.app_env,
        role=settings.service_role,
    )
    if settings.service_role == "student":
        container = request.app.state.container
        response.circuit_breakers = container.circuit_breakers().snapshot()
        response.bulkheads = container.bulkheads().snapshot()
    return response


@router.get(
    "/",
    status_code=status.HTTP_200_OK,
    summary="API Root",
    description="Confirms the API is running and links to the docs and health check.",
)
async def root(settings: Annotated[Settings, Depends(get_app_settings)]) -> dict[str, str]:
    """Root endpoint providing API information and navigation links."""
    return {
        "message": f"{settings.app_name} ({settings.service_role})",
        "docs": settings.docs_url,
        "health": f"{settings.api_v1_prefix}/health",
    }
