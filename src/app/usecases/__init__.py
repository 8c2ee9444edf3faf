"""Application use cases."""

from src.app.usecases.address_usecases import (
    GetAddressUseCase,
    GetFlakyResourceUseCase,
    ListAddressesUseCase,
    ListFlakyResourcesUseCase,
)


__all__ = [
    "GetAddressUseCase",
    "GetFlakyResourceUseCase",
    "ListAddressesUseCase",
    "ListFlakyResourcesUseCase",
]
