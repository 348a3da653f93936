"""Session gate: no token, no request; a rejected session is never retried.

Usage example:
    from ridewave_client.application.session_gate import SessionGate
    from ridewave_client.domain.endpoint import Endpoint

    gate = SessionGate(
        base_url=config.server_uri,
        accessor=accessor,
        executor=executor,
        coordinator=coordinator,
    )
    outcome = gate.execute(Endpoint("/me"), response_type=dict[str, object])
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.endpoint import Endpoint, join_url
from ..domain.outcomes import ApiFailure, AttemptOutcome, TerminalFailure, terminal
from ..exceptions import TokenStoreDataError
from ..infrastructure.resilience import CancellationToken, RetryCoordinator
from ..infrastructure.token_store import TokenStoreAccessor
from ..observability import get_logger
from ..protocols import RequestExecutor

logger = get_logger("ridewave_client.application.session_gate")

NOT_AUTHENTICATED_MESSAGE = "Not authenticated. Please log in again."
AUTH_FAILED_MESSAGE = "Authentication failed. Please log in again."


@dataclass
class SessionGate:
    """Wraps the retry coordinator with session checks.

    The gate reports a rejected session; it never deletes the stored token.
    """

    base_url: str
    accessor: TokenStoreAccessor
    executor: RequestExecutor
    coordinator: RetryCoordinator
    allow_loopback: bool = False

    def preflight(self) -> TerminalFailure | None:
        """Return a configuration failure if the base URL cannot work, else None."""
        validation = self.accessor.validate(self.base_url, allow_loopback=self.allow_loopback)
        if validation.valid:
            return None
        diagnostic = validation.diagnostic or "Server configuration error"
        logger.error("Server URI rejected: %s", diagnostic)
        return terminal("configuration", diagnostic)

    def read_token(self) -> str | None:
        """Return the stored token; an unreadable entry counts as no token."""
        try:
            return self.accessor.get()
        except TokenStoreDataError as exc:
            logger.error("Stored access token is unreadable: %s", exc)
            return None

    def execute[T](
        self,
        endpoint: Endpoint,
        *,
        response_type: type[T],
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> AttemptOutcome[T]:
        """Run an authenticated call through the coordinator."""
        rejected = self.preflight()
        if rejected is not None:
            return rejected

        token = self.read_token()
        if token is None:
            logger.warning(
                "No access token stored; %s %s not attempted", endpoint.method, endpoint.path
            )
            return terminal("not_authenticated", NOT_AUTHENTICATED_MESSAGE)

        url = join_url(self.base_url, endpoint.path)
        outcome = self.coordinator.run(
            lambda: self.executor.execute(
                url,
                endpoint,
                token=token,
                timeout_seconds=timeout_seconds,
                response_type=response_type,
            ),
            cancel=cancel,
        )

        if isinstance(outcome, TerminalFailure) and outcome.kind == "auth_invalid":
            logger.warning(
                "Session rejected by server (status=%s); re-login required",
                outcome.failure.status_code,
            )
            return TerminalFailure(
                ApiFailure(
                    kind="auth_invalid",
                    message=AUTH_FAILED_MESSAGE,
                    status_code=outcome.failure.status_code,
                    cause=outcome.failure.cause,
                )
            )
        return outcome
