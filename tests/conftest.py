"""Global test configuration and fixtures.

Fixture Scoping Strategy:
- session: test settings (immutable)
- function: apps, clients, fake address service, resilience objects (stateful)

The student service never talks to a real address service in tests. Its
shared ``httpx.AsyncClient`` is replaced with one backed by
``httpx.MockTransport``, which either routes requests into an in-process
address app or calls a handler the test controls.
"""

from collections.abc import Callable, Generator

import httpx
import pytest
from dependency_injector import providers
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.domain.models.address import Address, FlakyResource
from src.infrastructure.config import Settings
from src.presentation.api import create_app
from src.presentation.api.middleware.rate_limiting import limiter


ADDRESS_SERVICE_URL = "http://address-service.test"

TransportHandler = Callable[[httpx.Request], httpx.Response]


# ============================================================================
# Session-Scoped Fixtures (Immutable Resources)
# ============================================================================


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create base test settings (session-scoped).

    Resilience thresholds are small so tests can trip them with a handful of
    calls, and waits are zero so retries do not slow the suite down.

    Returns:
        Settings instance configured for testing
    """
    return Settings(
        app_env="testing",
        log_level="WARNING",
        address_service_url=ADDRESS_SERVICE_URL,
        otel_enabled=False,
        rate_limit_enabled=True,
        address_rate_limit="1000/minute",
        flaky_failure_rate=0.0,
        circuit_breaker_fail_max=4,
        circuit_breaker_wait_duration_open=60.0,
        circuit_breaker_half_open_calls=1,
        bulkhead_max_concurrent_calls=2,
        bulkhead_nolimit_max_concurrent_calls=10,
        bulkhead_max_wait_seconds=0.0,
        retry_max_attempts=3,
        retry_wait_seconds=0.0,
        retry_max_wait_seconds=0.0,
    )


# ============================================================================
# Function-Scoped Fixtures (Stateful Resources)
# ============================================================================


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> Generator[None]:
    """Clear rate limit counters so every test starts with a full budget."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def address_settings(test_settings: Settings) -> Settings:
    """Settings for an address service process."""
    return test_settings.model_copy(update={"service_role": "address"})


@pytest.fixture
def student_settings(test_settings: Settings) -> Settings:
    """Settings for a student service process."""
    return test_settings.model_copy(update={"service_role": "student"})


@pytest.fixture
def address_app(address_settings: Settings) -> FastAPI:
    """Create the address service application (function-scoped)."""
    return create_app(address_settings)


@pytest.fixture
def address_client(address_app: FastAPI) -> Generator[TestClient]:
    """Create test client for the address service.

    Yields:
        TestClient: Synchronous test client with lifespan started
    """
    with TestClient(address_app) as test_client:
        yield test_client


@pytest.fixture
def upstream_handler() -> dict[str, TransportHandler]:
    """Mutable slot holding the fake address service handler.

    Tests replace ``upstream_handler["handler"]`` to script the address
    service's answers. The default answers 404 for everything.
    """
    return {"handler": lambda request: httpx.Response(404)}


@pytest.fixture
def upstream_calls() -> list[httpx.Request]:
    """Requests the student service sent to the fake address service."""
    return []


@pytest.fixture
def fake_upstream_client(
    upstream_handler: dict[str, TransportHandler],
    upstream_calls: list[httpx.Request],
) -> httpx.AsyncClient:
    """Async HTTP client whose transport records and answers requests locally."""

    def handle(request: httpx.Request) -> httpx.Response:
        upstream_calls.append(request)
        return upstream_handler["handler"](request)

    return httpx.AsyncClient(base_url=ADDRESS_SERVICE_URL, transport=httpx.MockTransport(handle))


@pytest.fixture
def student_app(student_settings: Settings, fake_upstream_client: httpx.AsyncClient) -> FastAPI:
    """Create the student service application with a fake address service.

    Returns:
        FastAPI application whose outgoing HTTP client is the fake upstream
    """
    app = create_app(student_settings)
    app.state.container.http_client.override(providers.Object(fake_upstream_client))
    return app


@pytest.fixture
def student_client(student_app: FastAPI) -> Generator[TestClient]:
    """Create test client for the student service.

    Yields:
        TestClient: Synchronous test client with lifespan started
    """
    with TestClient(student_app) as test_client:
        yield test_client


@pytest.fixture
def sample_address() -> Address:
    """A single address record."""
    return Address(42, "Hauptstrasse", "12", "10115", "Berlin", "DE")


@pytest.fixture
def sample_flaky() -> FlakyResource:
    """A single flaky resource record."""
    return FlakyResource("FLK-001", "Campus map", "Printable campus map")


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers (in addition to pyproject.toml)."""
    config.addinivalue_line("markers", "slow: Tests that take more than 1 second")
    config.addinivalue_line("markers", "integration: Tests spanning HTTP, DI and middleware")
    config.addinivalue_line("markers", "unit: Fast unit tests with mocked dependencies")

