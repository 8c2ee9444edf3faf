"""Application-wide constants and limits."""


class ResilienceDefaults:
    """Default resilience policy values."""

    HTTP_TIMEOUT_SECONDS = 5.0  # Downstream request timeout

    # Circuit breaker
    FAIL_MAX = 5  # Consecutive failures that open the circuit
    RESET_TIMEOUT = 30.0  # Seconds before half-open
    SUCCESS_THRESHOLD = 1  # Trial calls while half-open

    # Bulkhead
    BULKHEAD_MAX_CONCURRENT_CALLS = 10
    BULKHEAD_NOLIMIT_MAX_CONCURRENT_CALLS = 100
    BULKHEAD_MAX_WAIT_SECONDS = 0.0  # Reject immediately when full

    # Retry
    RETRY_MAX_ATTEMPTS = 3
    RETRY_WAIT_SECONDS = 0.5
    RETRY_BACKOFF_MULTIPLIER = 2.0
    RETRY_MAX_WAIT_SECONDS = 5.0


class PolicyNames:
    """Names of the resilience components guarding each call path."""

    ADDRESS_BREAKER = "address-service"
    ADDRESS_BULKHEAD = "address"
    ADDRESS_NOLIMIT_BULKHEAD = "address-nolimit"
    FLAKY_RETRY = "flaky"
