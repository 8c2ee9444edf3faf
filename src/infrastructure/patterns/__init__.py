"""Microservice resilience patterns (circuit breaker, bulkhead, retry).

Each pattern wraps an async callable and returns a callable with the same
signature, so policies compose by nesting::

    guarded = breaker(bulkhead(client.get_address_by_id))
"""

from src.infrastructure.patterns.bulkhead import Bulkhead, BulkheadConfig, BulkheadService
from src.infrastructure.patterns.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerService,
    CircuitState,
)
from src.infrastructure.patterns.retry import RetryConfig, RetryPolicy


__all__ = [
    "Bulkhead",
    "BulkheadConfig",
    "BulkheadService",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerService",
    "CircuitState",
    "RetryConfig",
    "RetryPolicy",
]
