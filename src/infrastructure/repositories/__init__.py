"""Repository implementations."""

from src.infrastructure.repositories.address_repository import (
    InMemoryAddressRepository,
    load_addresses,
)
from src.infrastructure.repositories.flaky_repository import RandomlyFailingFlakyRepository


__all__ = ["InMemoryAddressRepository", "RandomlyFailingFlakyRepository", "load_addresses"]
