"""Test data factories and fake address service responses.

Factories give each test the record it needs with sensible defaults, and the
response helpers script what the fake address service sends back.
"""

from collections.abc import Callable, Iterable
from typing import Any

import httpx

from src.domain.models.address import Address, FlakyResource


def address_factory(
    id: int = 1,
    street: str = "Hauptstrasse",
    house_number: str = "12",
    zip_code: str = "10115",
    city: str = "Berlin",
    country: str = "DE",
) -> Address:
    """Factory function for creating Address instances with sensible defaults."""
    return Address(id, street, house_number, zip_code, city, country)


def address_batch_factory(count: int, start_id: int = 1) -> list[Address]:
    """Create ``count`` addresses with consecutive ids and distinct streets."""
    return [
        address_factory(id=start_id + offset, street=f"Street {start_id + offset}")
        for offset in range(count)
    ]


def flaky_factory(
    code: str = "FLK-001", name: str = "Campus map", description: str = ""
) -> FlakyResource:
    """Factory function for creating FlakyResource instances."""
    return FlakyResource(code, name, description)


def address_json(address: Address) -> dict[str, Any]:
    """Wire representation of an address as the address service returns it."""
    return {
        "id": address.id,
        "street": address.street,
        "house_number": address.house_number,
        "zip_code": address.zip_code,
        "city": address.city,
        "country": address.country,
    }


def flaky_json(resource: FlakyResource) -> dict[str, Any]:
    """Wire representation of a flaky resource."""
    return {"code": resource.code, "name": resource.name, "description": resource.description}


# ============================================================================
# Fake Address Service Handlers
# ============================================================================


Handler = Callable[[httpx.Request], httpx.Response]


def serve_addresses(addresses: Iterable[Address]) -> Handler:
    """Handler answering address lookups from ``addresses`` and 404 otherwise."""
    by_id = {address.id: address for address in addresses}

    def handle(request: httpx.Request) -> httpx.Response:
        address_id = int(request.url.path.rsplit("/", 1)[-1])
        if address_id in by_id:
            return httpx.Response(200, json=address_json(by_id[address_id]))
        return httpx.Response(404)

    return handle


def respond_with(status_code: int, json: Any = None) -> Handler:
    """Handler answering every request with the same status and body."""

    def handle(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=json)

    return handle


def fail_then(failures: int, handler: Handler, status_code: int = 503) -> Handler:
    """Handler failing the first ``failures`` requests, then delegating."""
    remaining = {"failures": failures}

    def handle(request: httpx.Request) -> httpx.Response:
        if remaining["failures"] > 0:
            remaining["failures"] -= 1
            return httpx.Response(status_code, json={"error": {"code": "FLAKY"}})
        return handler(request)

    return handle


def raise_transport_error(request: httpx.Request) -> httpx.Response:
    """Handler simulating an unreachable address service."""
    raise httpx.ConnectError("connection refused", request=request)
