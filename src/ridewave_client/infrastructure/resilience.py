"""Retry coordination and cancellation for outbound calls.

Usage example:
    from ridewave_client.domain.retry import RetryPolicy
    from ridewave_client.infrastructure.resilience import CancellationToken, RetryCoordinator

    coordinator = RetryCoordinator(policy=RetryPolicy(max_attempts=3, base_delay_seconds=1.0))
    cancel = CancellationToken()
    outcome = coordinator.run(lambda: executor.execute(url, endpoint, token=token), cancel=cancel)
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import override

from ..domain.outcomes import (
    ApiFailure,
    AttemptOutcome,
    Cancelled,
    RetryableFailure,
    TerminalFailure,
)
from ..domain.retry import RetryPolicy, decide_retry
from ..observability import get_logger
from ..protocols import Sleeper

logger = get_logger("ridewave_client.infrastructure.resilience")


class CancellationToken:
    """Caller-owned cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Block up to seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout=max(0.0, seconds))


class EventSleeper(Sleeper):
    """Sleeper that wakes early when the token is cancelled."""

    @override
    def wait(self, seconds: float, cancel: CancellationToken) -> bool:
        return not cancel.wait(seconds)


def _cancelled_after(attempt: int) -> Cancelled:
    return Cancelled(
        ApiFailure(kind="cancelled", message=f"Request was cancelled after attempt {attempt}.")
    )


@dataclass
class RetryCoordinator:
    """Re-invokes a single-attempt thunk while failures are retryable.

    Only network failures are retried, with linear backoff
    (``base_delay_seconds * attempt``). Once cancellation is observed no
    further attempt is started.
    """

    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleeper: Sleeper = field(default_factory=EventSleeper)

    def run[T](
        self,
        attempt: Callable[[], AttemptOutcome[T]],
        *,
        cancel: CancellationToken | None = None,
    ) -> AttemptOutcome[T]:
        """Run attempt up to ``policy.max_attempts`` times.

        Returns:
            The first success or terminal failure; the last failure (as
            terminal) once attempts are exhausted; or ``Cancelled``.
        """
        token = cancel or CancellationToken()
        attempt_index = 0
        while True:
            if token.cancelled:
                return _cancelled_after(attempt_index) if attempt_index else Cancelled()

            attempt_index += 1
            outcome = attempt()
            if not isinstance(outcome, RetryableFailure):
                return outcome

            if token.cancelled:
                return _cancelled_after(attempt_index)

            decision = decide_retry(outcome.kind, attempt=attempt_index, policy=self.policy)
            if not decision.should_retry:
                return TerminalFailure(outcome.failure)

            logger.warning(
                "Network error on attempt %d/%d. Retrying in %.1fs...",
                attempt_index,
                self.policy.max_attempts,
                decision.delay_seconds,
            )
            if not self.sleeper.wait(decision.delay_seconds, token):
                return _cancelled_after(attempt_index)
