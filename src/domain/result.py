"""Lookup result type distinguishing present, absent and failed lookups.

A remote lookup has three outcomes that callers must handle differently:
the resource exists, the resource does not exist, or the lookup could not be
performed at all. Collapsing the last case into "absent" would turn an outage
into a false 404, so the error is carried explicitly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum


class LookupStatus(StrEnum):
    """Outcome of a lookup."""

    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class LookupResult[T]:
    """Result of a lookup carrying exactly one of value, absence or error.

    Use the ``present``, ``absent`` and ``failed`` constructors rather than
    building instances directly.
    """

    status: LookupStatus
    value: T | None = None
    error: Exception | None = None

    @classmethod
    def present(cls, value: T) -> LookupResult[T]:
        """Build a result holding a found value."""
        return cls(status=LookupStatus.PRESENT, value=value)

    @classmethod
    def absent(cls) -> LookupResult[T]:
        """Build a result for a resource that does not exist."""
        return cls(status=LookupStatus.ABSENT)

    @classmethod
    def failed(cls, error: Exception) -> LookupResult[T]:
        """Build a result for a lookup that could not be completed."""
        return cls(status=LookupStatus.ERROR, error=error)

    @property
    def is_present(self) -> bool:
        return self.status is LookupStatus.PRESENT

    @property
    def is_absent(self) -> bool:
        return self.status is LookupStatus.ABSENT

    @property
    def is_error(self) -> bool:
        return self.status is LookupStatus.ERROR

    def unwrap(self) -> T | None:
        """Return the value, None when absent, or raise the carried error.

        Raises:
            Exception: The error carried by a failed result
        """
        if self.error is not None:
            raise self.error
        return self.value

    def map[U](self, func: Callable[[T], U]) -> LookupResult[U]:
        """Transform a present value, passing absence and errors through."""
        if self.is_present:
            return LookupResult.present(func(self.value))  # type: ignore[arg-type]
        return LookupResult(status=self.status, error=self.error)
