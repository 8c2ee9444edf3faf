"""Retry policy for calls to unreliable downstream endpoints.

Built on tenacity: a failed call is re-attempted up to ``max_attempts`` times
with an exponential backoff (a multiplier of 1.0 gives a fixed wait). Only
exceptions listed in ``retry_on`` are retried; once the attempts are used up
the last failure is re-raised unchanged.
"""

import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.domain.exceptions import UpstreamServiceError
from src.infrastructure.config import Settings
from src.infrastructure.constants import ResilienceDefaults
from src.infrastructure.logging.config import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """Attempt budget and backoff of a retry policy.

    Attributes:
        max_attempts: Total attempts including the first call
        wait_seconds: Wait before the second attempt
        backoff_multiplier: Growth factor of the wait per attempt
        max_wait_seconds: Upper bound of a single wait
        retry_on: Exception types that trigger another attempt
    """

    max_attempts: int = ResilienceDefaults.RETRY_MAX_ATTEMPTS
    wait_seconds: float = ResilienceDefaults.RETRY_WAIT_SECONDS
    backoff_multiplier: float = ResilienceDefaults.RETRY_BACKOFF_MULTIPLIER
    max_wait_seconds: float = ResilienceDefaults.RETRY_MAX_WAIT_SECONDS
    retry_on: tuple[type[BaseException], ...] = (UpstreamServiceError,)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryConfig":
        """Build the retry budget from application settings."""
        return cls(
            max_attempts=settings.retry_max_attempts,
            wait_seconds=settings.retry_wait_seconds,
            backoff_multiplier=settings.retry_backoff_multiplier,
            max_wait_seconds=settings.retry_max_wait_seconds,
        )


class RetryPolicy:
    """Named retry policy applicable to async callables.

    Example:
        >>> policy = RetryPolicy("flaky", RetryConfig(max_attempts=5))
        >>> fetch = policy(client.get_flaky_by_code)
        >>> resource = await fetch("FLK-001")
    """

    def __init__(self, name: str, config: RetryConfig | None = None) -> None:
        self.name = name
        self.config = config or RetryConfig()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(
                multiplier=self.config.wait_seconds,
                exp_base=self.config.backoff_multiplier,
                max=self.config.max_wait_seconds,
            ),
            retry=retry_if_exception_type(self.config.retry_on),
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retry_attempt_failed",
            retry=self.name,
            attempt=retry_state.attempt_number,
            max_attempts=self.config.max_attempts,
            error=str(exc),
            next_wait=retry_state.next_action.sleep if retry_state.next_action else None,
        )

    async def call[T](
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Execute an async callable, retrying retryable failures.

        Raises:
            Exception: The last failure once attempts are exhausted, or any
                non-retryable failure immediately
        """
        return await self._retrying()(func, *args, **kwargs)

    def __call__[**P, T](
        self, func: Callable[P, Awaitable[T]]
    ) -> Callable[P, Awaitable[T]]:
        """Wrap an async callable so every invocation is retried per this policy."""

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await self.call(func, *args, **kwargs)

        return wrapper
