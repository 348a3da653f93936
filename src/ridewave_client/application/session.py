"""Caller-side session policy.

The network layer only reports that a session was rejected. Deciding to throw
the token away belongs here: after ``max_auth_failures`` consecutive
rejections the stored token is cleared and the user must log in again.

Usage example:
    from ridewave_client.application.session import SessionManager

    session = SessionManager(accessor, max_auth_failures=2)
    session.login(access_token)
    rides = session.run(lambda: client.get("/driver/get-rides"))
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field

from ..domain.outcomes import AttemptOutcome, ErrorKind, Success
from ..exceptions import ApiError, TokenStoreDataError
from ..infrastructure.token_store import TokenStoreAccessor
from ..observability import get_logger

logger = get_logger("ridewave_client.application.session")

DEFAULT_MAX_AUTH_FAILURES = 2


@dataclass
class SessionManager:
    """Tracks consecutive session rejections and clears the token when they repeat."""

    accessor: TokenStoreAccessor
    max_auth_failures: int = DEFAULT_MAX_AUTH_FAILURES
    consecutive_auth_failures: int = field(default=0, init=False)

    def login(self, token: str) -> Future[None]:
        """Store a freshly issued token."""
        self.consecutive_auth_failures = 0
        return self.accessor.save(token)

    def logout(self) -> Future[None]:
        self.consecutive_auth_failures = 0
        return self.accessor.clear()

    def is_logged_in(self) -> bool:
        try:
            return self.accessor.get() is not None
        except TokenStoreDataError:
            return False

    def record_kind(self, kind: ErrorKind | None) -> bool:
        """Record the result of one call; None means success.

        Returns:
            True if this result caused the stored token to be cleared.
        """
        if kind is None:
            self.consecutive_auth_failures = 0
            return False
        if kind != "auth_invalid":
            return False

        self.consecutive_auth_failures += 1
        if self.consecutive_auth_failures < self.max_auth_failures:
            return False

        logger.warning(
            "Session rejected %d times in a row; clearing stored token",
            self.consecutive_auth_failures,
        )
        self.logout()
        return True

    def record(self, outcome: AttemptOutcome[object]) -> bool:
        if isinstance(outcome, Success):
            return self.record_kind(None)
        return self.record_kind(outcome.kind)

    def run[T](self, call: Callable[[], T]) -> T:
        """Run a client call, recording its result; errors are re-raised."""
        try:
            result = call()
        except ApiError as exc:
            self.record_kind(exc.kind)
            raise
        self.record_kind(None)
        return result
