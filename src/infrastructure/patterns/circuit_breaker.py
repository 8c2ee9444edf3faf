"""Circuit breaker pattern for resilient inter-service calls.

This module implements the circuit breaker pattern to prevent cascading
failures when calling the address service. State, counters and listeners come
from pybreaker; ``CircuitBreaker`` adapts them to awaited calls.

Circuit States:
    - Closed: Normal operation, consecutive failures are counted
    - Open: ``fail_max`` consecutive failures reached, calls fail fast with CircuitOpenError
    - Half-Open: Wait duration elapsed, a limited number of trial calls allowed

pybreaker only records outcomes of calls it runs itself, so the coroutine is
awaited outside of it and its outcome is then replayed through
``pybreaker.CircuitBreaker.call``. An outcome is replayed only while the
breaker is still in the state object that admitted the call: a call admitted
while closed that finishes after the circuit opened, or after a later
half-open, has no effect on the state.
"""

import asyncio
import functools
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import pybreaker

from src.domain.exceptions import BulkheadFullError, CircuitOpenError, UpstreamNotFoundError
from src.infrastructure.config import Settings
from src.infrastructure.constants import ResilienceDefaults
from src.infrastructure.logging.config import get_logger


logger = get_logger(__name__)


class CircuitState(StrEnum):
    """Circuit breaker states, valued as pybreaker reports them."""

    CLOSED = pybreaker.STATE_CLOSED
    OPEN = pybreaker.STATE_OPEN
    HALF_OPEN = pybreaker.STATE_HALF_OPEN


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Thresholds for a circuit breaker.

    Attributes:
        fail_max: Consecutive failures that open the circuit
        reset_timeout: Seconds to stay open before half-open
        success_threshold: Trial calls allowed while half-open, all of which
            must succeed to close the circuit
        ignore_exceptions: Exceptions that neither count as success nor failure
    """

    fail_max: int = ResilienceDefaults.FAIL_MAX
    reset_timeout: float = ResilienceDefaults.RESET_TIMEOUT
    success_threshold: int = ResilienceDefaults.SUCCESS_THRESHOLD
    ignore_exceptions: tuple[type[BaseException], ...] = (UpstreamNotFoundError, BulkheadFullError)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CircuitBreakerConfig":
        """Build breaker thresholds from application settings."""
        return cls(
            fail_max=settings.circuit_breaker_fail_max,
            reset_timeout=settings.circuit_breaker_wait_duration_open,
            success_threshold=settings.circuit_breaker_half_open_calls,
        )


class LoggingListener(pybreaker.CircuitBreakerListener):
    """Logs circuit breaker state transitions and call outcomes."""

    def state_change(
        self,
        cb: pybreaker.CircuitBreaker,
        old_state: pybreaker.CircuitBreakerState | None,
        new_state: pybreaker.CircuitBreakerState,
    ) -> None:
        """Log circuit state transitions (closed → open → half-open).

        Args:
            cb: Circuit breaker instance
            old_state: Previous circuit state
            new_state: New circuit state
        """
        logger.warning(
            "circuit_breaker_state_change",
            breaker=cb.name,
            old_state=old_state.name if old_state else None,
            new_state=new_state.name,
        )

    def failure(self, cb: pybreaker.CircuitBreaker, exc: BaseException) -> None:
        """Log service call failures and current failure count.

        Args:
            cb: Circuit breaker instance
            exc: Exception that caused the failure
        """
        logger.error(
            "circuit_breaker_failure",
            breaker=cb.name,
            error=str(exc),
            error_type=type(exc).__name__,
            failure_count=cb.fail_counter,
        )

    def success(self, cb: pybreaker.CircuitBreaker) -> None:
        """Log successful service calls.

        Args:
            cb: Circuit breaker instance
        """
        logger.debug("circuit_breaker_success", breaker=cb.name)


class CircuitBreaker:
    """Consecutive-failure circuit breaker guarding one downstream call path.

    Usable as a decorator on async callables (the wrapped callable keeps its
    signature) or directly through ``call``.

    Example:
        >>> breaker = CircuitBreaker("address-service")
        >>> guarded = breaker(client.get_address_by_id)
        >>> address = await guarded(42)
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        listeners: list[pybreaker.CircuitBreakerListener] | None = None,
    ) -> None:
        """Initialize a closed circuit breaker.

        Args:
            name: Unique identifier for the breaker (used in logs and errors)
            config: Thresholds; defaults are used when omitted
            clock: Monotonic time source for the open-state wait, injectable for tests
            listeners: pybreaker listeners notified besides the logging listener
        """
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._lock = threading.RLock()
        self._opened_at = 0.0
        self._trials_in_flight = 0
        self._breaker = pybreaker.CircuitBreaker(
            fail_max=self.config.fail_max,
            reset_timeout=self.config.reset_timeout,
            success_threshold=self.config.success_threshold,
            exclude=list(self.config.ignore_exceptions),
            listeners=[LoggingListener(), *(listeners or [])],
            name=name,
            throw_new_error_on_trip=False,
        )
        self._breaker.add_listener(_TransitionListener(self._on_transition))

    @property
    def state(self) -> CircuitState:
        """Current state, moving open to half-open once the wait has elapsed."""
        with self._lock:
            self._refresh_state()
            return CircuitState(self._breaker.current_state)

    @property
    def fail_counter(self) -> int:
        """Consecutive failures recorded while closed."""
        return self._breaker.fail_counter

    def metrics(self) -> dict[str, Any]:
        """Snapshot of breaker state for health reporting."""
        with self._lock:
            self._refresh_state()
            return {
                "state": self._breaker.current_state,
                "fail_counter": self._breaker.fail_counter,
                "fail_max": self._breaker.fail_max,
                "success_counter": self._breaker.success_counter,
            }

    def reset(self) -> None:
        """Force the breaker back to closed and clear its counters."""
        with self._lock:
            self._breaker.close()

    async def call[T](
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Execute an async callable under circuit breaker protection.

        Args:
            func: Async function to call with protection
            args: Positional arguments for function
            kwargs: Keyword arguments for function

        Returns:
            Function result if successful

        Raises:
            CircuitOpenError: If the circuit is open (downstream not invoked)
            Exception: Any exception raised by the protected function
        """
        admitted_by = self._acquire_permission()
        try:
            result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            self._release_permission(admitted_by)
            raise
        except Exception as exc:
            if self._breaker.is_system_error(exc):
                self._record(admitted_by, exc)
            else:
                self._release_permission(admitted_by)
            raise
        self._record(admitted_by, None)
        return result

    def __call__[**P, T](
        self, func: Callable[P, Awaitable[T]]
    ) -> Callable[P, Awaitable[T]]:
        """Wrap an async callable so every invocation goes through the breaker."""

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await self.call(func, *args, **kwargs)

        return wrapper

    def _acquire_permission(self) -> pybreaker.CircuitBreakerState:
        with self._lock:
            self._refresh_state()
            state = self._breaker.state
            if state.name == pybreaker.STATE_OPEN:
                raise CircuitOpenError(self.name)
            if state.name == pybreaker.STATE_HALF_OPEN:
                permits_used = self._trials_in_flight + self._breaker.success_counter
                if permits_used >= self._breaker.success_threshold:
                    raise CircuitOpenError(self.name)
                self._trials_in_flight += 1
            return state

    def _release_permission(self, admitted_by: pybreaker.CircuitBreakerState) -> None:
        with self._lock:
            if self._is_current(admitted_by) and admitted_by.name == pybreaker.STATE_HALF_OPEN:
                self._trials_in_flight -= 1

    def _record(
        self, admitted_by: pybreaker.CircuitBreakerState, error: Exception | None
    ) -> None:
        with self._lock:
            if not self._is_current(admitted_by):
                logger.debug(
                    "circuit_breaker_stale_outcome",
                    breaker=self.name,
                    admitted_in=admitted_by.name,
                    state=self._breaker.current_state,
                    failed=error is not None,
                )
                return
            if admitted_by.name == pybreaker.STATE_HALF_OPEN:
                self._trials_in_flight -= 1
            try:
                self._breaker.call(_replay, error)
            except Exception as replayed:
                if replayed is not error:
                    raise

    def _on_transition(self, new_state: str) -> None:
        self._trials_in_flight = 0
        if new_state == pybreaker.STATE_OPEN:
            self._opened_at = self._clock()

    def _is_current(self, admitted_by: pybreaker.CircuitBreakerState) -> bool:
        # pybreaker builds a new state object on every transition
        return self._breaker.state is admitted_by

    def _refresh_state(self) -> None:
        # Caller must hold the lock
        if (
            self._breaker.current_state == pybreaker.STATE_OPEN
            and self._clock() - self._opened_at >= self._breaker.reset_timeout
        ):
            self._breaker.half_open()


class _TransitionListener(pybreaker.CircuitBreakerListener):
    """Forwards the name of every new state to a callback."""

    def __init__(self, on_transition: Callable[[str], None]) -> None:
        self._on_transition = on_transition

    def state_change(self, cb: Any, old_state: Any, new_state: Any) -> None:
        self._on_transition(new_state.name)


def _replay(error: Exception | None) -> None:
    if error is not None:
        raise error


class CircuitBreakerService:
    """Registry of named circuit breakers shared across call paths.

    Circuit States:
        - Closed: Normal operation, requests pass through
        - Open: Too many failures, requests are blocked immediately
        - Half-Open: Testing recovery, limited requests allowed
    """

    def __init__(self, default_config: CircuitBreakerConfig | None = None) -> None:
        """Initialize circuit breaker service with empty breaker registry.

        Args:
            default_config: Thresholds for breakers created without explicit config
        """
        self._default_config = default_config or CircuitBreakerConfig()
        self._breakers: dict[str, CircuitBreaker] = {}

    def get_breaker(self, name: str, config: CircuitBreakerConfig | None = None) -> CircuitBreaker:
        """Get or create a circuit breaker for a named call path.

        Config only applies when the breaker is first created.

        Args:
            name: Unique identifier for the circuit breaker
            config: Thresholds for a newly created breaker

        Returns:
            Circuit breaker instance for the named call path
        """
        if name not in self._breakers:
            breaker_config = config or self._default_config
            self._breakers[name] = CircuitBreaker(name, breaker_config)
            logger.info(
                "circuit_breaker_created",
                name=name,
                fail_max=breaker_config.fail_max,
                reset_timeout=breaker_config.reset_timeout,
            )
        return self._breakers[name]

    async def call_with_breaker[T](
        self,
        breaker_name: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Execute function with the named breaker's protection.

        Raises:
            CircuitOpenError: If circuit is open (service unavailable)
            Exception: Any exception raised by the protected function
        """
        return await self.get_breaker(breaker_name).call(func, *args, **kwargs)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Metrics of every registered breaker keyed by name."""
        return {name: breaker.metrics() for name, breaker in self._breakers.items()}
