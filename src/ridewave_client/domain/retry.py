"""Retry policy and the pure retry decision.

Backoff is linear: the wait after attempt ``i`` is ``base_delay_seconds * i``.
No jitter is applied.

Usage example:
    from ridewave_client.domain.retry import RetryPolicy, decide_retry

    policy = RetryPolicy(max_attempts=3, base_delay_seconds=1.0)
    decision = decide_retry("network", attempt=1, policy=policy)
    # RetryDecision(action="retry", delay_seconds=1.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ..exceptions import RetryPolicyError
from .classification import is_retryable
from .outcomes import ErrorKind

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded linear retry for transient failures."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or self.max_attempts < 1:
            raise RetryPolicyError.for_max_attempts(self.max_attempts)
        if self.base_delay_seconds <= 0:
            raise RetryPolicyError.for_base_delay(self.base_delay_seconds)

    def delay_after(self, attempt: int) -> float:
        """Return the wait after the given 1-based attempt."""
        return self.base_delay_seconds * attempt


@dataclass(frozen=True)
class RetryDecision:
    action: Literal["retry", "stop"]
    delay_seconds: float = 0.0

    @property
    def should_retry(self) -> bool:
        return self.action == "retry"


STOP = RetryDecision(action="stop")


def decide_retry(kind: ErrorKind, *, attempt: int, policy: RetryPolicy) -> RetryDecision:
    """Decide what follows a failed attempt.

    Args:
        kind: Classification of the failure.
        attempt: 1-based index of the attempt that just failed.
        policy: Retry bounds and base delay.
    """
    if not is_retryable(kind):
        return STOP
    if attempt >= policy.max_attempts:
        return STOP
    return RetryDecision(action="retry", delay_seconds=policy.delay_after(attempt))
