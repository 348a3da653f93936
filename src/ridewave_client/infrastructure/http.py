"""Request executor built on requests.

Usage example:
    import requests

    from ridewave_client.domain.endpoint import Endpoint, join_url
    from ridewave_client.infrastructure.http import RequestsExecutor

    executor = RequestsExecutor(session=requests.Session(), timeout_seconds=15.0)
    endpoint = Endpoint("/driver/me")
    outcome = executor.execute(
        join_url("https://api.example.com/api/v1", endpoint.path), endpoint, token=token
    )
"""

from __future__ import annotations

import errno
import json
import socket
from collections.abc import Iterator, Mapping
from typing import override

import requests

from ..domain.classification import TransportCause, TransportOutcome, classify_transport
from ..domain.classification import is_retryable as is_retryable_kind
from ..domain.endpoint import Endpoint
from ..domain.outcomes import (
    ApiFailure,
    AttemptOutcome,
    ErrorKind,
    RetryableFailure,
    Success,
    TerminalFailure,
)
from ..io_validation import IncomingDataError, extract_error_message, validate_as, validate_json_as
from ..observability import get_logger
from ..protocols import RequestExecutor

logger = get_logger("ridewave_client.infrastructure.http")

DEFAULT_TIMEOUT_SECONDS = 15.0
JSON_CONTENT_TYPE = "application/json"

_REFUSED_MARKERS = ("connection refused", "econnrefused", "actively refused")
_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "failed to resolve",
    "temporary failure in name resolution",
    "enotfound",
)


def build_headers(token: str | None) -> dict[str, str]:
    """Return request headers; the bearer header is added only when a token is given."""
    headers = {"Content-Type": JSON_CONTENT_TYPE, "Accept": JSON_CONTENT_TYPE}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _iter_causes(error: BaseException) -> Iterator[object]:
    """Walk an exception, its args, and its cause chain (urllib3 nests deeply)."""
    seen: set[int] = set()
    stack: list[object] = [error]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, BaseException):
            stack.extend(current.args)
            if current.__cause__ is not None:
                stack.append(current.__cause__)
            if current.__context__ is not None:
                stack.append(current.__context__)
            reason = getattr(current, "reason", None)
            if reason is not None:
                stack.append(reason)


def _connection_cause(error: requests.ConnectionError) -> TransportCause:
    for item in _iter_causes(error):
        if isinstance(item, ConnectionRefusedError):
            return "connection_refused"
        if isinstance(item, socket.gaierror):
            return "dns_not_found"
        if isinstance(item, OSError) and item.errno == errno.ECONNREFUSED:
            return "connection_refused"
    text = str(error).lower()
    if any(marker in text for marker in _REFUSED_MARKERS):
        return "connection_refused"
    if any(marker in text for marker in _DNS_MARKERS):
        return "dns_not_found"
    return "connection"


def describe_request_exception(error: requests.RequestException) -> TransportOutcome:
    """Normalise a requests exception into a transport outcome.

    The status code is kept when the exception carries a response.
    """
    response = getattr(error, "response", None)
    status_code = response.status_code if isinstance(response, requests.Response) else None
    timed_out = isinstance(error, requests.Timeout)
    cause: TransportCause
    if timed_out:
        cause = "timeout"
    elif isinstance(error, requests.ConnectionError):
        cause = _connection_cause(error)
    else:
        cause = "other"
    return TransportOutcome(
        status_code=status_code,
        timed_out=timed_out,
        cause=cause,
        message=str(error),
    )


def _response_text(response: requests.Response) -> str:
    try:
        text = response.text
    except (UnicodeDecodeError, ValueError, requests.RequestException):
        return ""
    return text if isinstance(text, str) else ""


def describe_response(response: requests.Response) -> TransportOutcome:
    """Normalise a received response into a transport outcome."""
    headers = getattr(response, "headers", None)
    return TransportOutcome(
        status_code=response.status_code,
        body=_response_text(response),
        headers=dict(headers) if isinstance(headers, Mapping) else {},
    )


def _network_message(transport: TransportOutcome) -> str:
    if transport.timed_out:
        return "Network error: the request timed out."
    if transport.cause == "connection_refused":
        return "Network error: the server refused the connection."
    if transport.cause == "dns_not_found":
        return "Network error: the server address could not be resolved."
    return "Network error: no response was received."


def _status_message(transport: TransportOutcome) -> str:
    message = extract_error_message(transport.body)
    if message:
        return message
    return f"Request failed with status {transport.status_code}"


def failure_outcome(failure: ApiFailure) -> RetryableFailure | TerminalFailure:
    """Wrap a failure in the variant its kind calls for."""
    if is_retryable_kind(failure.kind):
        return RetryableFailure(failure)
    return TerminalFailure(failure)


def outcome_for_transport(
    transport: TransportOutcome,
    *,
    cause: BaseException | None = None,
) -> RetryableFailure | TerminalFailure | None:
    """Return the failure outcome for a transport outcome, or None when it is decodable."""
    kind: ErrorKind | None = classify_transport(transport)
    if kind is None:
        return None
    if kind == "network":
        message = _network_message(transport)
        status_code = None
    else:
        message = _status_message(transport)
        status_code = transport.status_code
    return failure_outcome(
        ApiFailure(kind=kind, message=message, status_code=status_code, cause=cause)
    )


def decode_body[T](
    transport: TransportOutcome, response_type: type[T]
) -> Success[T] | TerminalFailure:
    """Decode a 2xx body into the caller's expected shape."""
    status_code = transport.status_code or 200
    try:
        if transport.body.strip():
            value = validate_json_as(response_type, transport.body)
        else:
            value = validate_as(response_type, None)
    except IncomingDataError as exc:
        return TerminalFailure(
            ApiFailure(
                kind="malformed",
                message=f"Response body could not be decoded (status {status_code}).",
                status_code=status_code,
                cause=exc,
            )
        )
    return Success(value=value, status_code=status_code)


class RequestsExecutor(RequestExecutor):
    """Performs one HTTP attempt per call with a bounded timeout.

    - Payloads are JSON-encoded; Content-Type is always application/json
    - A bearer token is attached only when one is supplied
    - Connection, DNS and timeout failures become retryable network failures
    - Non-2xx responses become terminal failures with the server's message
    - Never retries; that is the coordinator's job
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session
        self.timeout_seconds = timeout_seconds

    @override
    def execute[T](
        self,
        url: str,
        endpoint: Endpoint,
        *,
        token: str | None = None,
        timeout_seconds: float | None = None,
        response_type: type[T],
    ) -> AttemptOutcome[T]:
        timeout = self.timeout_seconds if timeout_seconds is None else timeout_seconds
        body = json.dumps(endpoint.payload) if endpoint.has_payload else None
        logger.info(
            "Request %s %s (token attached: %s)", endpoint.method, url, token is not None
        )

        try:
            response = self.session.request(
                endpoint.method,
                url,
                headers=build_headers(token),
                data=body,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            transport = describe_request_exception(exc)
            failure = outcome_for_transport(transport, cause=exc)
            if failure is not None:
                logger.warning("Request %s %s failed: %s", endpoint.method, url, failure.kind)
                return failure
            # An exception that still carries a 2xx response is not something we can decode
            return TerminalFailure(
                ApiFailure(kind="malformed", message=str(exc), status_code=transport.status_code)
            )

        transport = describe_response(response)
        logger.info("Response %s %s: status=%s", endpoint.method, url, transport.status_code)
        failure = outcome_for_transport(transport)
        if failure is not None:
            return failure
        return decode_body(transport, response_type)
