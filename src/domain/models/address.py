"""Address and flaky resource value objects."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Address:
    """Immutable postal address record identified by an integer id."""

    id: int
    street: str
    house_number: str
    zip_code: str
    city: str
    country: str


@dataclass(frozen=True, slots=True)
class FlakyResource:
    """Resource served by an intentionally unreliable endpoint."""

    code: str
    name: str
    description: str = ""
