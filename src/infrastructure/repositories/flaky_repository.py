"""Flaky resource repository that fails on purpose.

Every read rolls a die against ``failure_rate`` and raises
FlakyResourceUnavailableError when it loses, giving callers an endpoint to
exercise their retry policies against.
"""

import random
from collections.abc import Iterable

from src.domain.exceptions import FlakyResourceUnavailableError
from src.domain.interfaces import IFlakyResourceRepository
from src.domain.models.address import FlakyResource
from src.infrastructure.logging.config import get_logger


logger = get_logger(__name__)

DEFAULT_FLAKY_RESOURCES: tuple[FlakyResource, ...] = (
    FlakyResource("FLK-001", "Campus map", "Printable campus map"),
    FlakyResource("FLK-002", "Timetable", "Current semester timetable"),
    FlakyResource("FLK-003", "Cafeteria menu", "Weekly cafeteria menu"),
)


class RandomlyFailingFlakyRepository(IFlakyResourceRepository):
    """Flaky resource store whose reads fail with a fixed probability."""

    def __init__(
        self,
        failure_rate: float,
        resources: Iterable[FlakyResource] = DEFAULT_FLAKY_RESOURCES,
        seed: int | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            failure_rate: Probability (0.0 - 1.0) that a read fails
            resources: Resources served when a read succeeds
            seed: Random seed for a reproducible failure sequence
        """
        self._failure_rate = failure_rate
        self._resources = {resource.code: resource for resource in resources}
        self._random = random.Random(seed)
        self.calls = 0

    async def get_by_code(self, code: str) -> FlakyResource | None:
        self._maybe_fail(f"flaky resource {code}")
        return self._resources.get(code)

    async def get_all(self) -> list[FlakyResource]:
        self._maybe_fail("flaky resource list")
        return [self._resources[code] for code in sorted(self._resources)]

    def _maybe_fail(self, target: str) -> None:
        self.calls += 1
        if self._random.random() < self._failure_rate:
            logger.info("flaky_failure_injected", target=target, call=self.calls)
            raise FlakyResourceUnavailableError(f"Simulated outage while reading {target}")
