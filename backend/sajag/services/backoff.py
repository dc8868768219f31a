"""
Backoff Policy — How long to wait before retrying, and how often.

WHAT THIS DOES:
Holds the one retry budget shared by every action (analyze, summarize, fact)
and computes the delay before each retry.

FORMULA:
delay(attempt) = base_delay_ms × 2^attempt

No jitter and no cap. The budget bounds it instead: with 3 retries and a
1000ms base, the runner waits 2000ms, 4000ms, then 8000ms.

USAGE:
    policy = BackoffPolicy.from_settings(get_settings())
    policy.delay(1)          # 2000
    policy.delay_seconds(1)  # 2.0, ready for asyncio.sleep
"""

from dataclasses import dataclass, field

from sajag.config import Settings

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 1000


@dataclass(frozen=True)
class BackoffPolicy:
    """Retry budget plus exponential delay schedule."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    """Retries allowed after the first attempt"""

    base_delay_ms: int = DEFAULT_BASE_DELAY_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
        )

    def delay(self, attempt: int) -> int:
        """Delay in milliseconds for the given attempt number."""
        if attempt < 0:
            raise ValueError("attempt must be >= 0")
        return self.base_delay_ms * 2 ** attempt

    def delay_seconds(self, attempt: int) -> float:
        return self.delay(attempt) / 1000

    def new_state(self) -> "RetryState":
        return RetryState(policy=self)


@dataclass
class RetryState:
    """
    Retry bookkeeping for one runner call.

    Created when a call starts, bumped on each failed attempt,
    thrown away when the call ends.
    """

    policy: BackoffPolicy
    attempt: int = field(default=0)

    @property
    def max_attempts(self) -> int:
        return self.policy.max_attempts

    @property
    def base_delay_ms(self) -> int:
        return self.policy.base_delay_ms

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.policy.max_attempts

    def next_delay_seconds(self) -> float:
        """Wait before the next attempt."""
        return self.policy.delay_seconds(self.attempt + 1)

    def advance(self) -> None:
        self.attempt += 1
