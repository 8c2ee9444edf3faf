"""Address lookup endpoints served by the address service."""

from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, Request, Response, status

from src.app.usecases.address_usecases import GetAddressUseCase, ListAddressesUseCase
from src.container import Container
from src.infrastructure.telemetry import observation
from src.presentation.api.middleware.rate_limiting import address_rate_limit, limiter
from src.presentation.schemas.address import AddressResponse
from src.presentation.schemas.error import ErrorResponse


router = APIRouter(prefix="/address", tags=["address"])

AddressId = Annotated[int, Path(description="Address identifier")]

_LOOKUP_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_200_OK: {"description": "Address found", "model": AddressResponse},
    status.HTTP_404_NOT_FOUND: {"description": "No address with this id (empty body)"},
    status.HTTP_422_UNPROCESSABLE_CONTENT: {
        "description": "Id is not an integer",
        "model": ErrorResponse,
    },
}


async def _lookup(
    use_case: GetAddressUseCase, address_id: int, tier: str
) -> Response | AddressResponse:
    with observation(
        "address-->database",
        name="address.lookup",
        low_cardinality={"endpoint.tier": tier},
        address_id=address_id,
    ) as span:
        address = await use_case.execute(address_id)
        span.set_attribute("address.found", address is not None)

    if address is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return AddressResponse.model_validate(address)


@router.get(
    "",
    response_model=list[AddressResponse],
    status_code=status.HTTP_200_OK,
    summary="List Addresses",
    description="Return every address ordered by id. No pagination.",
)
@inject
async def list_addresses(
    use_case: Annotated[
        ListAddressesUseCase, Depends(Provide[Container.use_cases.list_addresses])
    ],
) -> list[AddressResponse]:
    """List all addresses."""
    with observation("address-->database", name="address.list"):
        addresses = await use_case.execute()
    return [AddressResponse.model_validate(address) for address in addresses]


@router.get(
    "/nolimit/{address_id}",
    response_model=AddressResponse,
    status_code=status.HTTP_200_OK,
    summary="Get Address (unlimited)",
    description="Same lookup as `/address/{id}` without the per-client rate limit.",
    responses=_LOOKUP_RESPONSES,
)
@inject
async def get_address_no_limit(
    address_id: AddressId,
    use_case: Annotated[GetAddressUseCase, Depends(Provide[Container.use_cases.get_address])],
) -> Response | AddressResponse:
    """Get an address by id, exempt from rate limiting."""
    return await _lookup(use_case, address_id, tier="nolimit")


@router.get(
    "/{address_id}",
    response_model=AddressResponse,
    status_code=status.HTTP_200_OK,
    summary="Get Address",
    description="Look up an address by id. Rate limited per client.",
    responses={
        **_LOOKUP_RESPONSES,
        status.HTTP_429_TOO_MANY_REQUESTS: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(address_rate_limit)
@inject
async def get_address(
    request: Request,
    address_id: AddressId,
    use_case: Annotated[GetAddressUseCase, Depends(Provide[Container.use_cases.get_address])],
) -> Response | AddressResponse:
    """Get an address by id.

    Args:
        request: Incoming request, used by the rate limiter to key the client
        address_id: Address identifier
        use_case: Injected use case instance

    Returns:
        The address, or an empty 404 response when unknown
    """
    return await _lookup(use_case, address_id, tier="standard")
