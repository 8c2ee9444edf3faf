"""Bulkhead pattern capping concurrent calls per downstream call path.

A bulkhead is a counting semaphore: a call acquires a slot before it runs and
releases it afterwards. When every slot is taken the call either waits up to
``max_wait_seconds`` for one to free up or, with a zero wait, is rejected at
once with BulkheadFullError. Either way the excess call is never forwarded.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, NoReturn

from src.domain.exceptions import BulkheadFullError
from src.infrastructure.constants import ResilienceDefaults
from src.infrastructure.logging.config import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class BulkheadConfig:
    """Concurrency bound of a bulkhead.

    Attributes:
        max_concurrent_calls: Maximum calls in flight at once
        max_wait_seconds: How long an excess call may queue; 0 rejects immediately
    """

    max_concurrent_calls: int = ResilienceDefaults.BULKHEAD_MAX_CONCURRENT_CALLS
    max_wait_seconds: float = ResilienceDefaults.BULKHEAD_MAX_WAIT_SECONDS


class Bulkhead:
    """Semaphore-backed concurrency limiter for async callables."""

    def __init__(self, name: str, config: BulkheadConfig | None = None) -> None:
        self.name = name
        self.config = config or BulkheadConfig()
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent_calls)
        self._in_flight = 0
        self._rejected = 0

    @property
    def in_flight(self) -> int:
        """Number of calls currently holding a slot."""
        return self._in_flight

    @property
    def available_slots(self) -> int:
        return self.config.max_concurrent_calls - self._in_flight

    def metrics(self) -> dict[str, Any]:
        """Snapshot of bulkhead usage for health reporting."""
        return {
            "max_concurrent_calls": self.config.max_concurrent_calls,
            "in_flight": self._in_flight,
            "rejected": self._rejected,
        }

    async def call[T](
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Execute an async callable inside a bulkhead slot.

        Raises:
            BulkheadFullError: If no slot becomes available in time
            Exception: Any exception raised by the protected function
        """
        await self._acquire()
        self._in_flight += 1
        try:
            return await func(*args, **kwargs)
        finally:
            self._in_flight -= 1
            self._semaphore.release()

    def __call__[**P, T](
        self, func: Callable[P, Awaitable[T]]
    ) -> Callable[P, Awaitable[T]]:
        """Wrap an async callable so every invocation takes a bulkhead slot."""

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await self.call(func, *args, **kwargs)

        return wrapper

    async def _acquire(self) -> None:
        if self.config.max_wait_seconds <= 0:
            if self._semaphore.locked():
                self._reject()
            await self._semaphore.acquire()
            return

        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self.config.max_wait_seconds)
        except TimeoutError:
            self._reject()

    def _reject(self) -> NoReturn:
        self._rejected += 1
        logger.warning(
            "bulkhead_full",
            bulkhead=self.name,
            max_concurrent_calls=self.config.max_concurrent_calls,
            max_wait=self.config.max_wait_seconds,
        )
        raise BulkheadFullError(self.name, self.config.max_concurrent_calls)


class BulkheadService:
    """Registry of named bulkheads."""

    def __init__(self) -> None:
        self._bulkheads: dict[str, Bulkhead] = {}

    def get_bulkhead(self, name: str, config: BulkheadConfig | None = None) -> Bulkhead:
        """Get or create a bulkhead; config only applies on first creation."""
        if name not in self._bulkheads:
            self._bulkheads[name] = Bulkhead(name, config)
            logger.info(
                "bulkhead_created",
                name=name,
                max_concurrent_calls=self._bulkheads[name].config.max_concurrent_calls,
            )
        return self._bulkheads[name]

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Metrics of every registered bulkhead keyed by name."""
        return {name: bulkhead.metrics() for name, bulkhead in self._bulkheads.items()}
