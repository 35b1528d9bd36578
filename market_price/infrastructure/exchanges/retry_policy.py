"""
Close Retry Policy
==================
Decides whether and when the subscription manager retries a failed close.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config.settings import MarketPriceSettings

DEFAULT_CLOSE_RETRY_INTERVAL_SECONDS = 0.3


@dataclass(frozen=True)
class CloseRetryPolicy:
    """
    Fixed-interval retry for tearing down the active subscription.

    Attributes:
        interval_seconds: Delay before every retry (no growth)
        max_attempts: Total attempts allowed, None retries forever
    """
    interval_seconds: float = DEFAULT_CLOSE_RETRY_INTERVAL_SECONDS
    max_attempts: Optional[int] = None

    def __post_init__(self):
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 or None")

    def should_retry(self, attempt: int) -> bool:
        """``attempt`` is the number of attempts already made."""
        return self.max_attempts is None or attempt < self.max_attempts

    def delay_for(self, attempt: int) -> float:
        return self.interval_seconds

    @classmethod
    def from_settings(cls, settings: 'MarketPriceSettings') -> 'CloseRetryPolicy':
        return cls(
            interval_seconds=settings.close_retry_interval_seconds,
            max_attempts=settings.close_retry_max_attempts,
        )
