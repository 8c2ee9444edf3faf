"""Domain models."""

from src.domain.models.address import Address, FlakyResource


__all__ = ["Address", "FlakyResource"]
