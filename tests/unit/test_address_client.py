"""Tests for the address service HTTP client.

Test Organization:
- TestRequestRouting: Paths requested for each operation
- TestSuccessfulDecoding: JSON bodies become domain objects
- TestFailureClassification: 404 vs. every other failure
"""

from collections.abc import Callable

import httpx
import pytest

from src.domain.exceptions import UpstreamNotFoundError, UpstreamServiceError
from src.domain.models.address import Address, FlakyResource
from src.external.address_client import AddressServiceClient, create_http_client
from src.infrastructure.config import Settings
from tests.factories import (
    address_factory,
    address_json,
    flaky_factory,
    flaky_json,
    raise_transport_error,
    respond_with,
)


BASE_URL = "http://address-service.test"


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    seen: list[httpx.Request] | None = None,
    flaky_path: str = "/api/v1/flaky",
) -> AddressServiceClient:
    """Address client whose transport answers with ``handler``."""

    def handle(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return handler(request)

    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handle))
    return AddressServiceClient(http, flaky_path=flaky_path)


# ============================================================================
# Routing Tests
# ============================================================================


class TestRequestRouting:
    """Test request paths for each operation."""

    @pytest.mark.asyncio
    async def test_standard_and_nolimit_routes(self) -> None:
        """Test the two address tiers hit different routes.

        Arrange: Transport recording requests
        Act: Call both address operations for id 42
        Assert: GET /api/v1/address/42 and /api/v1/address/nolimit/42
        """
        # Arrange
        seen: list[httpx.Request] = []
        client = make_client(respond_with(200, address_json(address_factory(id=42))), seen)

        # Act
        await client.get_address_by_id(42)
        await client.get_address_by_id_no_limit(42)

        # Assert
        assert [(r.method, r.url.path) for r in seen] == [
            ("GET", "/api/v1/address/42"),
            ("GET", "/api/v1/address/nolimit/42"),
        ]

    @pytest.mark.asyncio
    async def test_flaky_routes_use_configured_prefix(self) -> None:
        """Test the flaky prefix is configurable and a trailing slash is ignored."""
        # Arrange
        seen: list[httpx.Request] = []
        resource = flaky_factory("FLK-003")
        client = make_client(
            lambda request: (
                httpx.Response(200, json=[flaky_json(resource)])
                if request.url.path.endswith("/unstable")
                else httpx.Response(200, json=flaky_json(resource))
            ),
            seen,
            flaky_path="/unstable/",
        )

        # Act
        await client.get_flaky_by_code("FLK-003")
        await client.get_all_flaky()

        # Assert
        assert [r.url.path for r in seen] == ["/unstable/FLK-003", "/unstable"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("code", "raw_path"),
        [
            ("FLK-001?x=1", b"/api/v1/flaky/FLK-001%3Fx%3D1"),
            ("FLK#1", b"/api/v1/flaky/FLK%231"),
            ("a/b", b"/api/v1/flaky/a%2Fb"),
            ("..", b"/api/v1/flaky/%2E%2E"),
            (".", b"/api/v1/flaky/%2E"),
            ("FLK 1", b"/api/v1/flaky/FLK%201"),
        ],
    )
    async def test_flaky_code_is_sent_as_one_escaped_segment(
        self, code: str, raw_path: bytes
    ) -> None:
        """Test a code cannot add a query, a fragment or another path segment.

        Arrange: Transport recording requests
        Act: Look up a code containing URL delimiters
        Assert: The code arrives percent-encoded under the flaky prefix, no query
        """
        # Arrange
        seen: list[httpx.Request] = []
        client = make_client(respond_with(200, flaky_json(flaky_factory("FLK-001"))), seen)

        # Act
        await client.get_flaky_by_code(code)

        # Assert
        assert len(seen) == 1
        assert seen[0].url.raw_path == raw_path
        assert seen[0].url.query == b""

    def test_create_http_client_uses_settings(self) -> None:
        """Test the shared client targets the configured base URL and timeout."""
        # Arrange
        settings = Settings(address_service_url="http://address:9000/", http_timeout_seconds=2.5)

        # Act
        http = create_http_client(settings)

        # Assert
        assert str(http.base_url).rstrip("/") == "http://address:9000"
        assert http.timeout.read == 2.5
        assert http.headers["Accept"] == "application/json"


# ============================================================================
# Decoding Tests
# ============================================================================


class TestSuccessfulDecoding:
    """Test JSON decoding into domain objects."""

    @pytest.mark.asyncio
    async def test_decodes_address(self) -> None:
        """Test a 200 body becomes an Address."""
        # Arrange
        expected = address_factory(id=7, house_number="3a", zip_code="8001")
        client = make_client(respond_with(200, address_json(expected)))

        # Act
        address = await client.get_address_by_id(7)

        # Assert
        assert isinstance(address, Address)
        assert address == expected

    @pytest.mark.asyncio
    async def test_decodes_flaky_list(self) -> None:
        """Test a 200 array body becomes a list of FlakyResource."""
        # Arrange
        resources = [flaky_factory("A", "One"), flaky_factory("B", "Two", "second")]
        client = make_client(respond_with(200, [flaky_json(r) for r in resources]))

        # Act
        result = await client.get_all_flaky()

        # Assert
        assert result == resources
        assert all(isinstance(r, FlakyResource) for r in result)


# ============================================================================
# Failure Classification Tests
# ============================================================================


class TestFailureClassification:
    """Test how failures are reported to the resilience layer."""

    @pytest.mark.asyncio
    async def test_404_raises_upstream_not_found(self) -> None:
        """Test a 404 is business absence, not a failure."""
        # Arrange
        client = make_client(respond_with(404))

        # Act & Assert
        with pytest.raises(UpstreamNotFoundError):
            await client.get_address_by_id(999)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 429, 500, 502, 503])
    async def test_other_error_statuses_raise_upstream_error(self, status_code: int) -> None:
        """Test every other non-2xx is an upstream failure carrying the status."""
        # Arrange
        client = make_client(respond_with(status_code, {"error": {"code": "X"}}))

        # Act & Assert
        with pytest.raises(UpstreamServiceError) as exc_info:
            await client.get_address_by_id(1)

        assert exc_info.value.status_code == status_code
        assert not isinstance(exc_info.value, UpstreamNotFoundError)

    @pytest.mark.asyncio
    async def test_transport_error_raises_upstream_error(self) -> None:
        """Test an unreachable service is an upstream failure without status."""
        # Arrange
        client = make_client(raise_transport_error)

        # Act & Assert
        with pytest.raises(UpstreamServiceError) as exc_info:
            await client.get_flaky_by_code("FLK-001")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self) -> None:
        """Test a read timeout is an upstream failure."""

        # Arrange
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = make_client(timeout)

        # Act & Assert
        with pytest.raises(UpstreamServiceError, match="Timed out"):
            await client.get_address_by_id(1)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_upstream_error(self) -> None:
        """Test an undecodable body is an upstream failure."""
        # Arrange
        client = make_client(lambda request: httpx.Response(200, content=b"<html>"))

        # Act & Assert
        with pytest.raises(UpstreamServiceError, match="invalid JSON"):
            await client.get_address_by_id(1)

    @pytest.mark.asyncio
    async def test_unexpected_payload_raises_upstream_error(self) -> None:
        """Test a JSON body of the wrong shape is an upstream failure with details."""
        # Arrange
        client = make_client(respond_with(200, {"id": 1, "street": "Only a street"}))

        # Act & Assert
        with pytest.raises(UpstreamServiceError) as exc_info:
            await client.get_address_by_id(1)

        assert isinstance(exc_info.value.details, list)
        assert any(detail["loc"] == ["city"] for detail in exc_info.value.details)
