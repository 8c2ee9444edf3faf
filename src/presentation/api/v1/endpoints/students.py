"""Student service endpoints.

Lookups go to the address service through the resilience-wrapped services.
A ``LookupResult`` is rendered as: present → 200, absent → empty 404,
error → re-raised and mapped by the exception handlers (502/503).
"""

from typing import Annotated, Any

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, Response, status
from pydantic import BaseModel

from src.app.services.address_proxy_service import AddressProxyService
from src.app.services.flaky_service import FlakyResourceService
from src.container import Container
from src.domain.result import LookupResult
from src.presentation.schemas.address import AddressResponse, FlakyDto
from src.presentation.schemas.error import ErrorResponse


router = APIRouter(prefix="/student", tags=["student"])

AddressId = Annotated[int, Path(description="Address identifier")]

_UPSTREAM_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_404_NOT_FOUND: {"description": "Not found upstream (empty body)"},
    status.HTTP_502_BAD_GATEWAY: {
        "description": "Address service failed or is unreachable",
        "model": ErrorResponse,
    },
    status.HTTP_503_SERVICE_UNAVAILABLE: {
        "description": "Circuit open or bulkhead full",
        "model": ErrorResponse,
    },
}


def _render[S: BaseModel](result: LookupResult[Any], schema: type[S]) -> Response | S:
    value = result.unwrap()  # raises the recorded error
    if value is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return schema.model_validate(value)


@router.get(
    "/address/nolimit/{address_id}",
    response_model=AddressResponse,
    summary="Get Student Address (unlimited)",
    responses=_UPSTREAM_RESPONSES,
)
@inject
async def get_student_address_no_limit(
    address_id: AddressId,
    service: Annotated[
        AddressProxyService, Depends(Provide[Container.address_proxy_service])
    ],
) -> Response | AddressResponse:
    """Resolve an address through the address service's unlimited route."""
    result = await service.get_student_address_no_limit(address_id)
    return _render(result, AddressResponse)


@router.get(
    "/address/{address_id}",
    response_model=AddressResponse,
    summary="Get Student Address",
    responses=_UPSTREAM_RESPONSES,
)
@inject
async def get_student_address(
    address_id: AddressId,
    service: Annotated[
        AddressProxyService, Depends(Provide[Container.address_proxy_service])
    ],
) -> Response | AddressResponse:
    """Resolve an address through the address service.

    Args:
        address_id: Address identifier
        service: Injected proxy service (circuit breaker + bulkhead)

    Returns:
        The address, or an empty 404 when the address service has none
    """
    result = await service.get_student_address(address_id)
    return _render(result, AddressResponse)


@router.get(
    "/flaky",
    response_model=list[FlakyDto],
    summary="List Flaky Resources",
    responses={status.HTTP_502_BAD_GATEWAY: _UPSTREAM_RESPONSES[status.HTTP_502_BAD_GATEWAY]},
)
@inject
async def list_flaky(
    service: Annotated[FlakyResourceService, Depends(Provide[Container.flaky_service])],
) -> list[FlakyDto]:
    """Fetch all flaky resources, retrying upstream failures.

    The listing has no absent case: an upstream 404 is reported as 502.
    """
    resources = await service.get_all_flaky()
    return [FlakyDto.model_validate(resource) for resource in resources]


@router.get(
    "/flaky/{code}",
    response_model=FlakyDto,
    summary="Get Flaky Resource",
    responses=_UPSTREAM_RESPONSES,
)
@inject
async def get_flaky(
    code: str,
    service: Annotated[FlakyResourceService, Depends(Provide[Container.flaky_service])],
) -> Response | FlakyDto:
    """Fetch one flaky resource, retrying upstream failures."""
    result = await service.get_flaky_by_code(code)
    return _render(result, FlakyDto)
