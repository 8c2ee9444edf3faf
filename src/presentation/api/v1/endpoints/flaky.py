"""Flaky resource endpoints served by the address service.

Every request may fail with a 503 according to the configured failure rate,
giving the student service's retry policy something to work against.
"""

from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response, status

from src.app.usecases.address_usecases import GetFlakyResourceUseCase, ListFlakyResourcesUseCase
from src.container import Container
from src.infrastructure.telemetry import observation
from src.presentation.schemas.address import FlakyDto
from src.presentation.schemas.error import ErrorResponse


router = APIRouter(prefix="/flaky", tags=["flaky"])

_UNAVAILABLE = {
    status.HTTP_503_SERVICE_UNAVAILABLE: {
        "description": "Simulated outage",
        "model": ErrorResponse,
    },
}


@router.get(
    "",
    response_model=list[FlakyDto],
    status_code=status.HTTP_200_OK,
    summary="List Flaky Resources",
    responses=_UNAVAILABLE,
)
@inject
async def list_flaky(
    use_case: Annotated[
        ListFlakyResourcesUseCase, Depends(Provide[Container.use_cases.list_flaky])
    ],
) -> list[FlakyDto]:
    with observation("address-->flaky", name="flaky.list"):
        resources = await use_case.execute()
    return [FlakyDto.model_validate(resource) for resource in resources]


@router.get(
    "/{code}",
    response_model=FlakyDto,
    status_code=status.HTTP_200_OK,
    summary="Get Flaky Resource",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "Unknown code (empty body)"},
        **_UNAVAILABLE,
    },
)
@inject
async def get_flaky(
    code: str,
    use_case: Annotated[
        GetFlakyResourceUseCase, Depends(Provide[Container.use_cases.get_flaky])
    ],
) -> Response | FlakyDto:
    """Get a flaky resource by code.

    Raises:
        FlakyResourceUnavailableError: Rendered as 503 by the exception handlers
    """
    with observation("address-->flaky", name="flaky.lookup", code=code):
        resource = await use_case.execute(code)

    if resource is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return FlakyDto.model_validate(resource)
