"""Repository interfaces defining data access contracts.

This module defines abstract interfaces for the read-only repositories served
by the address service. Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from src.domain.models.address import Address, FlakyResource


class IAddressRepository(ABC):
    """Read-only address store."""

    @abstractmethod
    async def get_by_id(self, address_id: int) -> Address | None:
        """Retrieve an address by id.

        Args:
            address_id: Address identifier (any integer is accepted)

        Returns:
            The address if found, None otherwise
        """

    @abstractmethod
    async def get_all(self) -> list[Address]:
        """Retrieve every address ordered by id."""


class IFlakyResourceRepository(ABC):
    """Store whose reads fail intermittently."""

    @abstractmethod
    async def get_by_code(self, code: str) -> FlakyResource | None:
        """Retrieve a flaky resource by code.

        Raises:
            FlakyResourceUnavailableError: When the simulated outage strikes
        """

    @abstractmethod
    async def get_all(self) -> list[FlakyResource]:
        """Retrieve every flaky resource ordered by code.

        Raises:
            FlakyResourceUnavailableError: When the simulated outage strikes
        """
