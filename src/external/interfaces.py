"""External service interface definitions.

This module defines the abstract contract for calling the address service from
the student service, enabling dependency injection and testing with fakes.
"""

from abc import ABC, abstractmethod

from src.domain.models.address import Address, FlakyResource


class IAddressServiceClient(ABC):
    """Abstract client for the address service HTTP API.

    Implementations translate method calls into HTTP requests and decode the
    JSON responses. They apply no retry or circuit logic; failures surface to
    the caller unmodified.
    """

    @abstractmethod
    async def get_address_by_id(self, address_id: int) -> Address:
        """Fetch an address through the rate-limited route.

        Raises:
            UpstreamNotFoundError: If the address does not exist
            UpstreamServiceError: On transport failure or non-2xx response
        """

    @abstractmethod
    async def get_address_by_id_no_limit(self, address_id: int) -> Address:
        """Fetch an address through the unlimited route.

        Raises:
            UpstreamNotFoundError: If the address does not exist
            UpstreamServiceError: On transport failure or non-2xx response
        """

    @abstractmethod
    async def get_flaky_by_code(self, code: str) -> FlakyResource:
        """Fetch a single flaky resource by code.

        Raises:
            UpstreamNotFoundError: If the resource does not exist
            UpstreamServiceError: On transport failure or non-2xx response
        """

    @abstractmethod
    async def get_all_flaky(self) -> list[FlakyResource]:
        """Fetch every flaky resource.

        Raises:
            UpstreamServiceError: On transport failure or non-2xx response
        """
