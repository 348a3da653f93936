"""Custom exceptions for the Ridewave API client.

Caller-facing failures all derive from ``ApiError`` and carry the classified
kind, a human-readable message and, when a response was received, the HTTP
status code. The remaining exceptions report programming or configuration
mistakes and are raised before any request is attempted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain.outcomes import ApiFailure, ErrorKind


class RidewaveClientError(Exception):
    """Base exception for all client errors."""

    pass


class ApiError(RidewaveClientError):
    """Raised when a call to the backend does not produce a usable response."""

    kind: ErrorKind = "server_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        if kind is not None:
            self.kind = kind


class NetworkError(ApiError):
    """Raised when no response was received (connection, DNS or timeout failure)."""

    kind: ErrorKind = "network"


class AuthenticationFailedError(ApiError):
    """Raised when the backend rejects the session (401/403).

    The stored token is left untouched; the caller decides whether to log out.
    """

    kind: ErrorKind = "auth_invalid"

    @classmethod
    def for_status(cls, status_code: int) -> AuthenticationFailedError:
        return cls("Authentication failed. Please log in again.", status_code=status_code)


class ClientHttpError(ApiError):
    """Raised for 4xx responses other than authentication failures."""

    kind: ErrorKind = "client_error"


class ServerHttpError(ApiError):
    """Raised for 5xx responses."""

    kind: ErrorKind = "server_error"


class MalformedResponseError(ApiError):
    """Raised when a response body cannot be decoded into the expected shape."""

    kind: ErrorKind = "malformed"


class NotAuthenticatedError(ApiError):
    """Raised when no access token is stored. No request was attempted."""

    kind: ErrorKind = "not_authenticated"

    def __init__(self, message: str = "Not authenticated. Please log in again.") -> None:
        super().__init__(message)


class RequestCancelledError(ApiError):
    """Raised when the caller cancelled the call before it completed."""

    kind: ErrorKind = "cancelled"

    def __init__(self, message: str = "Request was cancelled.") -> None:
        super().__init__(message)


class ServerUriError(ApiError):
    """Raised when the configured server URI cannot be used from this host."""

    kind: ErrorKind = "configuration"

    def __init__(self, diagnostic: str) -> None:
        super().__init__(diagnostic)


_ERRORS_BY_KIND: dict[str, type[ApiError]] = {
    "network": NetworkError,
    "auth_invalid": AuthenticationFailedError,
    "client_error": ClientHttpError,
    "server_error": ServerHttpError,
    "malformed": MalformedResponseError,
    "not_authenticated": NotAuthenticatedError,
    "cancelled": RequestCancelledError,
    "configuration": ServerUriError,
}


def error_for_failure(failure: ApiFailure) -> ApiError:
    """Build the typed exception matching a classified failure."""
    error_cls = _ERRORS_BY_KIND.get(failure.kind, ApiError)
    if error_cls in (NotAuthenticatedError, RequestCancelledError, ServerUriError):
        error = error_cls(failure.message)
        error.status_code = failure.status_code
        return error
    return error_cls(failure.message, status_code=failure.status_code, kind=failure.kind)


class EmptyEndpointPathError(ValueError):
    """Raised when an endpoint path is empty."""

    def __init__(self) -> None:
        super().__init__("Endpoint path must not be empty.")


class UnsupportedMethodError(ValueError):
    """Raised when an endpoint uses an HTTP method the client does not issue."""

    def __init__(self, method: str) -> None:
        super().__init__(
            f"Unsupported HTTP method: {method!r}. Use one of GET, POST, PATCH, PUT, DELETE."
        )


class RetryPolicyError(ValueError):
    """Raised when a retry policy is configured with out-of-range values."""

    @classmethod
    def for_max_attempts(cls, value: int) -> RetryPolicyError:
        return cls(f"max_attempts must be a positive integer (got {value}).")

    @classmethod
    def for_base_delay(cls, value: float) -> RetryPolicyError:
        return cls(f"base_delay_seconds must be positive (got {value}).")


class ConfigFileNotFoundError(RidewaveClientError):
    """Raised when a client config file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(RidewaveClientError):
    """Raised when a client config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} could not be parsed: {detail}")


class ConfigFileValidationError(RidewaveClientError):
    """Raised when a client config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")


class TokenStoreDataError(RidewaveClientError):
    """Raised when a persisted token document is unreadable."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Token store entry is not a valid token document: {path}")
