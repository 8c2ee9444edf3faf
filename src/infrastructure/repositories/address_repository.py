"""In-memory address repository.

Addresses are loaded once at startup, from a JSON file when one is configured
and from the built-in data set otherwise, and served read-only.
"""

from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter

from src.domain.interfaces import IAddressRepository
from src.domain.models.address import Address
from src.infrastructure.logging.config import get_logger


logger = get_logger(__name__)

_ADDRESS_LIST = TypeAdapter(list[Address])

DEFAULT_ADDRESSES: tuple[Address, ...] = (
    Address(1, "Hauptstrasse", "12", "10115", "Berlin", "DE"),
    Address(2, "Bahnhofstrasse", "3a", "8001", "Zurich", "CH"),
    Address(3, "Rue de Rivoli", "99", "75001", "Paris", "FR"),
    Address(4, "Via del Corso", "18", "00186", "Rome", "IT"),
    Address(5, "Kalverstraat", "92", "1012 PH", "Amsterdam", "NL"),
    Address(6, "Gran Via", "28", "28013", "Madrid", "ES"),
    Address(7, "Karntner Strasse", "5", "1010", "Vienna", "AT"),
    Address(8, "Nowy Swiat", "44", "00-363", "Warsaw", "PL"),
)


def load_addresses(path: str | None = None) -> list[Address]:
    """Load address records from a JSON array file or fall back to built-in data.

    Args:
        path: Path to a JSON array of address objects, or None

    Returns:
        Addresses in file order (or the built-in order)

    Raises:
        FileNotFoundError: If the configured file does not exist
        pydantic.ValidationError: If the file content is not a list of addresses
    """
    if path is None:
        return list(DEFAULT_ADDRESSES)

    addresses = _ADDRESS_LIST.validate_json(Path(path).read_bytes())
    logger.info("addresses_loaded", path=path, count=len(addresses))
    return addresses


class InMemoryAddressRepository(IAddressRepository):
    """Read-only address store keyed by id."""

    def __init__(self, addresses: Iterable[Address]) -> None:
        self._addresses = {address.id: address for address in addresses}

    async def get_by_id(self, address_id: int) -> Address | None:
        return self._addresses.get(address_id)

    async def get_all(self) -> list[Address]:
        return [self._addresses[key] for key in sorted(self._addresses)]
