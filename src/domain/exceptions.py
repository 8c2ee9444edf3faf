"""Domain-specific exceptions for business and dependency errors.

This module defines the exception hierarchy shared by both services, providing
consistent error handling across the application layer. Business conditions
(not found) and infrastructure conditions (upstream failure, open circuit,
full bulkhead) are separate branches so they stay distinguishable end-to-end.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain-related errors.

    Provides a consistent interface for domain exceptions with error codes
    and optional contextual details.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error context (dict or list)
    """

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | list[Any] | None = None) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error description
            details: Optional additional context about the error
        """
        self.message = message
        self.details = details
        super().__init__(self.message)


class EntityNotFoundError(DomainException):
    """Raised when a requested entity does not exist."""

    code = "ENTITY_NOT_FOUND"


class UpstreamNotFoundError(EntityNotFoundError):
    """Raised when a downstream service answers 404 for a resource.

    This is a business outcome, not a dependency failure: resilience policies
    neither retry it nor count it against the circuit breaker.
    """

    code = "UPSTREAM_NOT_FOUND"


class UpstreamServiceError(DomainException):
    """Raised when a downstream call fails at transport level or returns non-2xx.

    Attributes:
        status_code: HTTP status returned by the downstream service, if any
    """

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class ServiceUnavailableError(DomainException):
    """Raised when a call is refused locally to protect a dependency."""

    code = "SERVICE_UNAVAILABLE"


class CircuitOpenError(ServiceUnavailableError):
    """Raised when a circuit breaker is open and the call fails fast.

    Attributes:
        breaker: Name of the circuit breaker that rejected the call
    """

    code = "CIRCUIT_OPEN"

    def __init__(self, breaker: str) -> None:
        super().__init__(
            f"Circuit breaker '{breaker}' is open; call not permitted",
            details={"breaker": breaker},
        )
        self.breaker = breaker


class BulkheadFullError(ServiceUnavailableError):
    """Raised when a bulkhead has no free slot for another concurrent call.

    Attributes:
        bulkhead: Name of the bulkhead that rejected the call
    """

    code = "BULKHEAD_FULL"

    def __init__(self, bulkhead: str, max_concurrent_calls: int) -> None:
        super().__init__(
            f"Bulkhead '{bulkhead}' is full ({max_concurrent_calls} concurrent calls)",
            details={"bulkhead": bulkhead, "max_concurrent_calls": max_concurrent_calls},
        )
        self.bulkhead = bulkhead


class FlakyResourceUnavailableError(ServiceUnavailableError):
    """Raised by the flaky resource endpoint when it simulates an outage."""

    code = "FLAKY_RESOURCE_UNAVAILABLE"
