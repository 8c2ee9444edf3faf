"""Student-side address lookups guarded by circuit breaker and bulkhead.

Both lookups share one circuit breaker (the address service is one dependency)
but run in separate bulkheads, so the ``nolimit`` tier can be given a wider
concurrency bound without duplicating the lookup code.
"""

from collections.abc import Awaitable, Callable

from src.domain.exceptions import (
    ServiceUnavailableError,
    UpstreamNotFoundError,
    UpstreamServiceError,
)
from src.domain.models.address import Address
from src.domain.result import LookupResult
from src.external.interfaces import IAddressServiceClient
from src.infrastructure.logging.config import get_logger
from src.infrastructure.patterns.bulkhead import Bulkhead
from src.infrastructure.patterns.circuit_breaker import CircuitBreaker


logger = get_logger(__name__)

AddressLookup = Callable[[int], Awaitable[Address]]


class AddressProxyService:
    """Resolves student addresses through the address service."""

    def __init__(
        self,
        address_client: IAddressServiceClient,
        circuit_breaker: CircuitBreaker,
        bulkhead: Bulkhead,
        nolimit_bulkhead: Bulkhead,
    ) -> None:
        """Initialize the service and compose the resilience policies.

        Args:
            address_client: Client for the address service
            circuit_breaker: Breaker shared by both lookup tiers
            bulkhead: Concurrency bound of the standard tier
            nolimit_bulkhead: Concurrency bound of the nolimit tier
        """
        self._lookup: AddressLookup = circuit_breaker(bulkhead(address_client.get_address_by_id))
        self._lookup_no_limit: AddressLookup = circuit_breaker(
            nolimit_bulkhead(address_client.get_address_by_id_no_limit)
        )

    async def get_student_address(self, address_id: int) -> LookupResult[Address]:
        """Look up an address through the rate-limited tier."""
        return await self._resolve(self._lookup, address_id, tier="standard")

    async def get_student_address_no_limit(self, address_id: int) -> LookupResult[Address]:
        """Look up an address through the unlimited tier."""
        return await self._resolve(self._lookup_no_limit, address_id, tier="nolimit")

    async def _resolve(
        self, lookup: AddressLookup, address_id: int, tier: str
    ) -> LookupResult[Address]:
        try:
            address = await lookup(address_id)
        except UpstreamNotFoundError:
            logger.info("student_address_not_found", address_id=address_id, tier=tier)
            return LookupResult.absent()
        except (ServiceUnavailableError, UpstreamServiceError) as e:
            logger.warning(
                "student_address_lookup_failed",
                address_id=address_id,
                tier=tier,
                error_code=e.code,
                error=e.message,
            )
            return LookupResult.failed(e)
        return LookupResult.present(address)
