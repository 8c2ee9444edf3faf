"""API schemas."""

from src.presentation.schemas.address import AddressResponse, FlakyDto
from src.presentation.schemas.error import ErrorDetail, ErrorResponse


__all__ = [
    "AddressResponse",
    "ErrorDetail",
    "ErrorResponse",
    "FlakyDto",
]
