"""Dependency injection container configuration."""

from dependency_injector import containers, providers

from src.app.services.address_proxy_service import AddressProxyService
from src.app.services.flaky_service import FlakyResourceService
from src.app.usecases.address_usecases import (
    GetAddressUseCase,
    GetFlakyResourceUseCase,
    ListAddressesUseCase,
    ListFlakyResourcesUseCase,
)
from src.external.address_client import AddressServiceClient, create_http_client
from src.infrastructure.config import get_settings
from src.infrastructure.constants import PolicyNames
from src.infrastructure.patterns.bulkhead import BulkheadConfig, BulkheadService
from src.infrastructure.patterns.circuit_breaker import (
    CircuitBreakerConfig,
    CircuitBreakerService,
)
from src.infrastructure.patterns.retry import RetryConfig, RetryPolicy
from src.infrastructure.repositories.address_repository import (
    InMemoryAddressRepository,
    load_addresses,
)
from src.infrastructure.repositories.flaky_repository import RandomlyFailingFlakyRepository


class AddressUseCases(containers.DeclarativeContainer):
    """Address service use cases container for better organization."""

    address_repository = providers.Dependency()
    flaky_repository = providers.Dependency()

    get_address = providers.Factory(GetAddressUseCase, address_repository=address_repository)
    list_addresses = providers.Factory(ListAddressesUseCase, address_repository=address_repository)
    get_flaky = providers.Factory(GetFlakyResourceUseCase, flaky_repository=flaky_repository)
    list_flaky = providers.Factory(ListFlakyResourcesUseCase, flaky_repository=flaky_repository)


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Configuration
    config = providers.Singleton(get_settings)

    # ------------------------------------------------------------------
    # Address service
    # ------------------------------------------------------------------
    address_repository = providers.Singleton(
        InMemoryAddressRepository,
        addresses=providers.Callable(load_addresses, config.provided.address_data_file),
    )
    flaky_repository = providers.Singleton(
        RandomlyFailingFlakyRepository,
        failure_rate=config.provided.flaky_failure_rate,
        seed=config.provided.flaky_random_seed,
    )

    use_cases = providers.Container(
        AddressUseCases,
        address_repository=address_repository,
        flaky_repository=flaky_repository,
    )

    # ------------------------------------------------------------------
    # Student service
    # ------------------------------------------------------------------

    # Resilience registries (state shared process-wide per call path)
    circuit_breakers = providers.Singleton(
        CircuitBreakerService,
        default_config=providers.Factory(CircuitBreakerConfig.from_settings, settings=config),
    )
    bulkheads = providers.Singleton(BulkheadService)

    address_circuit_breaker = circuit_breakers.provided.get_breaker.call(
        PolicyNames.ADDRESS_BREAKER
    )
    address_bulkhead = bulkheads.provided.get_bulkhead.call(
        PolicyNames.ADDRESS_BULKHEAD,
        config=providers.Factory(
            BulkheadConfig,
            max_concurrent_calls=config.provided.bulkhead_max_concurrent_calls,
            max_wait_seconds=config.provided.bulkhead_max_wait_seconds,
        ),
    )
    address_nolimit_bulkhead = bulkheads.provided.get_bulkhead.call(
        PolicyNames.ADDRESS_NOLIMIT_BULKHEAD,
        config=providers.Factory(
            BulkheadConfig,
            max_concurrent_calls=config.provided.bulkhead_nolimit_max_concurrent_calls,
            max_wait_seconds=config.provided.bulkhead_max_wait_seconds,
        ),
    )
    flaky_retry = providers.Singleton(
        RetryPolicy,
        name=PolicyNames.FLAKY_RETRY,
        config=providers.Factory(RetryConfig.from_settings, settings=config),
    )

    # External services
    http_client = providers.Singleton(create_http_client, settings=config)
    address_client = providers.Singleton(
        AddressServiceClient,
        http_client=http_client,
        flaky_path=config.provided.address_service_flaky_path,
    )

    address_proxy_service = providers.Singleton(
        AddressProxyService,
        address_client=address_client,
        circuit_breaker=address_circuit_breaker,
        bulkhead=address_bulkhead,
        nolimit_bulkhead=address_nolimit_bulkhead,
    )
    flaky_service = providers.Singleton(
        FlakyResourceService,
        address_client=address_client,
        retry_policy=flaky_retry,
    )
