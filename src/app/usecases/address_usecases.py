"""Address service use cases: read-only lookups over the local repositories."""

from src.domain.interfaces import IAddressRepository, IFlakyResourceRepository
from src.domain.models.address import Address, FlakyResource


class GetAddressUseCase:
    """Use case for getting an address by id."""

    def __init__(self, address_repository: IAddressRepository) -> None:
        self._repository = address_repository

    async def execute(self, address_id: int) -> Address | None:
        """Execute the use case.

        Any integer id is forwarded to the repository; unknown ids yield None.

        Args:
            address_id: The id of the address to retrieve

        Returns:
            The address, or None when no address has that id
        """
        return await self._repository.get_by_id(address_id)


class ListAddressesUseCase:
    """Use case for listing every address."""

    def __init__(self, address_repository: IAddressRepository) -> None:
        self._repository = address_repository

    async def execute(self) -> list[Address]:
        """Return all addresses ordered by id, without pagination."""
        return await self._repository.get_all()


class GetFlakyResourceUseCase:
    """Use case for getting a flaky resource by code."""

    def __init__(self, flaky_repository: IFlakyResourceRepository) -> None:
        self._repository = flaky_repository

    async def execute(self, code: str) -> FlakyResource | None:
        """Execute the use case.

        Raises:
            FlakyResourceUnavailableError: When the simulated outage strikes
        """
        return await self._repository.get_by_code(code)


class ListFlakyResourcesUseCase:
    """Use case for listing every flaky resource."""

    def __init__(self, flaky_repository: IFlakyResourceRepository) -> None:
        self._repository = flaky_repository

    async def execute(self) -> list[FlakyResource]:
        return await self._repository.get_all()
