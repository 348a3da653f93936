"""Protocol definitions for dependency injection.

These protocols define the seams the client depends on, enabling isolated unit
testing with in-memory fakes instead of real storage, sockets or timers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .domain.endpoint import Endpoint
    from .domain.outcomes import AttemptOutcome
    from .infrastructure.resilience import CancellationToken


@runtime_checkable
class TokenStore(Protocol):
    """Key-value persistence for credentials, populated by the login flow."""

    def get(self, key: str) -> str | None:
        """Return the stored value for key, or None if not present."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value atomically."""
        ...

    def delete(self, key: str) -> None:
        """Remove key if present."""
        ...


@runtime_checkable
class Sleeper(Protocol):
    """Inter-retry wait that can be interrupted by cancellation."""

    def wait(self, seconds: float, cancel: CancellationToken) -> bool:
        """Wait for seconds.

        Returns:
            True if the full delay elapsed, False if cancellation interrupted it.
        """
        ...


@runtime_checkable
class RequestExecutor(Protocol):
    """Performs exactly one HTTP attempt and reports its outcome."""

    def execute[T](
        self,
        url: str,
        endpoint: Endpoint,
        *,
        token: str | None = None,
        timeout_seconds: float | None = None,
        response_type: type[T],
    ) -> AttemptOutcome[T]:
        """Issue one request to url and classify the result."""
        ...
