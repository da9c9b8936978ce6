"""
Retry policy for booking creation.

Only conflict-class errors are retried (a full slot, or contention the
database detected). The whole transactional body runs again after a linear
backoff of ``attempt * base_delay``: 50ms, then 100ms with the defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.config import settings
from ..core.exceptions import ConflictException


@dataclass(frozen=True)
class BookingRetryPolicy:
    """Bounded, linear-backoff retry policy."""

    max_attempts: int = 3
    base_delay_seconds: float = 0.05

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative")

    @classmethod
    def from_settings(cls) -> "BookingRetryPolicy":
        return cls(
            max_attempts=settings.booking_max_attempts,
            base_delay_seconds=settings.booking_retry_base_delay_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return attempt * self.base_delay_seconds

    def should_retry(self, attempt: int, error: Optional[BaseException] = None) -> bool:
        """
        Whether another attempt may follow failed attempt number ``attempt``.

        When ``error`` is given it must also be a retryable conflict.
        """
        if attempt >= self.max_attempts:
            return False
        if error is None:
            return True
        return is_retryable_conflict(error)


def is_retryable_conflict(error: BaseException) -> bool:
    return isinstance(error, ConflictException) and error.retryable
