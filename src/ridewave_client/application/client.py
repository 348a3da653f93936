"""Caller-facing API client.

``request`` returns the decoded body or raises the ``ApiError`` subclass for
the failure; ``outcome`` returns the raw ``AttemptOutcome`` instead.

Usage example:
    from ridewave_client.composition import build_api_client
    from ridewave_client.config import ClientConfig

    client = build_api_client(ClientConfig.from_env())
    driver = client.get("/driver/me", response_type=dict[str, object])
    client.put("/driver/update-status", payload={"status": "active"})
"""

from __future__ import annotations

from ..domain.endpoint import Endpoint, join_url, normalise_method
from ..domain.outcomes import AttemptOutcome, Success
from ..exceptions import ServerUriError, error_for_failure
from ..infrastructure.resilience import CancellationToken, RetryCoordinator
from ..infrastructure.token_store import TokenStoreAccessor
from ..protocols import RequestExecutor
from .session_gate import SessionGate


def unwrap[T](outcome: AttemptOutcome[T]) -> T:
    """Return the success value or raise the typed error for the failure."""
    if isinstance(outcome, Success):
        return outcome.value
    raise error_for_failure(outcome.failure)


class ApiClient:
    """Resilient authenticated client for the Ridewave backend."""

    def __init__(
        self,
        *,
        base_url: str,
        accessor: TokenStoreAccessor,
        executor: RequestExecutor,
        coordinator: RetryCoordinator | None = None,
        allow_loopback: bool = False,
    ) -> None:
        self.accessor = accessor
        self.gate = SessionGate(
            base_url=base_url,
            accessor=accessor,
            executor=executor,
            coordinator=coordinator or RetryCoordinator(),
            allow_loopback=allow_loopback,
        )

    @property
    def base_url(self) -> str:
        return self.gate.base_url

    def server_uri(self) -> str:
        """Return the configured base URL, raising ServerUriError if it cannot be used."""
        rejected = self.gate.preflight()
        if rejected is not None:
            raise ServerUriError(rejected.failure.message)
        return self.gate.base_url.strip()

    def outcome[T](
        self,
        endpoint: Endpoint,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> AttemptOutcome[T]:
        return self.gate.execute(
            endpoint,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )

    def request[T](
        self,
        endpoint: Endpoint,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        """Run an authenticated call.

        Raises:
            NotAuthenticatedError: No token is stored; nothing was sent.
            AuthenticationFailedError: The server answered 401/403.
            NetworkError: No response after every attempt.
            ClientHttpError / ServerHttpError: Other 4xx / 5xx responses.
            MalformedResponseError: The body did not match response_type.
            RequestCancelledError: cancel was triggered.
            ServerUriError: The base URL failed local validation.
        """
        return unwrap(
            self.outcome(
                endpoint,
                response_type=response_type,
                cancel=cancel,
                timeout_seconds=timeout_seconds,
            )
        )

    def request_anonymous[T](
        self,
        endpoint: Endpoint,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        """Run a call that does not require a session (login, OTP verification).

        A stored token is still attached when present.
        """
        gate = self.gate
        rejected = gate.preflight()
        if rejected is not None:
            return unwrap(rejected)
        token = gate.read_token()
        url = join_url(gate.base_url, endpoint.path)
        outcome = gate.coordinator.run(
            lambda: gate.executor.execute(
                url,
                endpoint,
                token=token,
                timeout_seconds=timeout_seconds,
                response_type=response_type,
            ),
            cancel=cancel,
        )
        return unwrap(outcome)

    def send[T](
        self,
        method: str,
        path: str,
        *,
        payload: object = None,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        """Build an endpoint from parts and run it as an authenticated call."""
        endpoint = Endpoint(path, method=normalise_method(method), payload=payload)
        return self.request(
            endpoint,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )

    def get[T](
        self,
        path: str,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        return self.send(
            "GET",
            path,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )

    def post[T](
        self,
        path: str,
        payload: object = None,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        return self.send(
            "POST",
            path,
            payload=payload,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )

    def put[T](
        self,
        path: str,
        payload: object = None,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        return self.send(
            "PUT",
            path,
            payload=payload,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )

    def patch[T](
        self,
        path: str,
        payload: object = None,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        return self.send(
            "PATCH",
            path,
            payload=payload,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )

    def delete[T](
        self,
        path: str,
        *,
        response_type: type[T] = object,
        cancel: CancellationToken | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        return self.send(
            "DELETE",
            path,
            response_type=response_type,
            cancel=cancel,
            timeout_seconds=timeout_seconds,
        )
