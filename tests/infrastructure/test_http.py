"""Tests for the requests-backed executor."""

from __future__ import annotations

import json
import logging
import socket
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
import requests

from ridewave_client.domain.endpoint import Endpoint
from ridewave_client.domain.outcomes import RetryableFailure, Success, TerminalFailure
from ridewave_client.infrastructure.http import (
    RequestsExecutor,
    build_headers,
    describe_request_exception,
)

URL = "https://api.example.com/api/v1/driver/me"


def _response(status_code: int, body: object = None, *, text: str | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text if text is not None else ("" if body is None else json.dumps(body))
    response.headers = {"Content-Type": "application/json"}
    return response


def _executor(session: MagicMock, timeout_seconds: float = 15.0) -> RequestsExecutor:
    return RequestsExecutor(session=session, timeout_seconds=timeout_seconds)


def _session_returning(response: MagicMock) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = response
    return session


def _session_raising(error: Exception) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = error
    return session


class _RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@pytest.fixture
def http_log() -> Iterator[_RecordingHandler]:
    handler = _RecordingHandler()
    logger = logging.getLogger("ridewave_client.infrastructure.http")
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)


class TestBuildHeaders:
    def test_bearer_header_when_token_given(self) -> None:
        headers = build_headers("tok-123")
        assert headers["Authorization"] == "Bearer tok-123"
        assert headers["Content-Type"] == "application/json"

    def test_no_authorization_without_token(self) -> None:
        headers = build_headers(None)
        assert "Authorization" not in headers
        assert headers["Content-Type"] == "application/json"


class TestRequestsExecutorSending:
    def test_sends_one_request_with_headers_payload_and_timeout(self) -> None:
        session = _session_returning(_response(200, {"success": True}))
        endpoint = Endpoint("/driver/update-status", method="PUT", payload={"status": "active"})

        _executor(session, timeout_seconds=12.0).execute(
            URL, endpoint, token="tok-123", response_type=object
        )

        session.request.assert_called_once()
        args, kwargs = session.request.call_args
        assert args == ("PUT", URL)
        assert kwargs["headers"]["Authorization"] == "Bearer tok-123"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert json.loads(kwargs["data"]) == {"status": "active"}
        assert kwargs["timeout"] == 12.0

    def test_get_without_payload_sends_no_body(self) -> None:
        session = _session_returning(_response(200, {}))

        _executor(session).execute(URL, Endpoint("/driver/me"), response_type=object)

        _, kwargs = session.request.call_args
        assert kwargs["data"] is None
        assert "Authorization" not in kwargs["headers"]

    def test_per_call_timeout_overrides_default(self) -> None:
        session = _session_returning(_response(200, {}))

        _executor(session, timeout_seconds=15.0).execute(
            URL, Endpoint("/me"), timeout_seconds=3.0, response_type=object
        )

        assert session.request.call_args.kwargs["timeout"] == 3.0

    def test_token_is_never_logged(self, http_log: _RecordingHandler) -> None:
        session = _session_returning(_response(200, {}))

        _executor(session).execute(URL, Endpoint("/me"), token="secret-token", response_type=object)

        assert http_log.messages
        assert all("secret-token" not in message for message in http_log.messages)


class TestRequestsExecutorResponses:
    def test_decodes_json_body(self) -> None:
        session = _session_returning(_response(200, {"driver": {"id": "d1"}}))

        outcome = _executor(session).execute(
            URL, Endpoint("/driver/me"), response_type=dict[str, object]
        )

        assert isinstance(outcome, Success)
        assert outcome.value == {"driver": {"id": "d1"}}
        assert outcome.status_code == 200

    def test_empty_body_decodes_to_none(self) -> None:
        session = _session_returning(_response(204))

        outcome = _executor(session).execute(
            URL, Endpoint("/rides/1", method="DELETE"), response_type=object
        )

        assert isinstance(outcome, Success)
        assert outcome.value is None

    def test_invalid_json_is_malformed(self) -> None:
        session = _session_returning(_response(200, text="<html>oops</html>"))

        outcome = _executor(session).execute(URL, Endpoint("/me"), response_type=object)

        assert isinstance(outcome, TerminalFailure)
        assert outcome.kind == "malformed"
        assert outcome.failure.status_code == 200

    def test_shape_mismatch_is_malformed(self) -> None:
        session = _session_returning(_response(200, ["not", "an", "object"]))

        outcome = _executor(session).execute(URL, Endpoint("/me"), response_type=dict[str, object])

        assert isinstance(outcome, TerminalFailure)
        assert outcome.kind == "malformed"

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses_are_terminal(self, status: int) -> None:
        session = _session_returning(_response(status, {"message": "jwt expired"}))

        outcome = _executor(session).execute(URL, Endpoint("/me"), token="t", response_type=object)

        assert isinstance(outcome, TerminalFailure)
        assert outcome.kind == "auth_invalid"
        assert outcome.failure.status_code == status
        assert session.request.call_count == 1

    def test_client_error_uses_message_field(self) -> None:
        session = _session_returning(_response(404, {"message": "Ride not found"}))

        outcome = _executor(session).execute(URL, Endpoint("/rides/9"), response_type=object)

        assert isinstance(outcome, TerminalFailure)
        assert outcome.kind == "client_error"
        assert outcome.failure.message == "Ride not found"
        assert outcome.failure.status_code == 404

    def test_server_error_uses_error_field(self) -> None:
        session = _session_returning(_response(500, {"error": "database unavailable"}))

        outcome = _executor(session).execute(URL, Endpoint("/rides"), response_type=object)

        assert isinstance(outcome, TerminalFailure)
        assert outcome.kind == "server_error"
        assert outcome.failure.message == "database unavailable"

    def test_undecodable_error_body_falls_back_to_status_message(self) -> None:
        session = _session_returning(_response(502, text="<html>Bad Gateway</html>"))

        outcome = _executor(session).execute(URL, Endpoint("/rides"), response_type=object)

        assert isinstance(outcome, TerminalFailure)
        assert outcome.failure.message == "Request failed with status 502"


class TestRequestsExecutorTransportFailures:
    def test_connection_refused_is_retryable_network(self) -> None:
        error = requests.ConnectionError(ConnectionRefusedError(111, "Connection refused"))
        session = _session_raising(error)

        outcome = _executor(session).execute(URL, Endpoint("/me"), response_type=object)

        assert isinstance(outcome, RetryableFailure)
        assert outcome.kind == "network"
        assert outcome.failure.status_code is None
        assert outcome.failure.cause is error

    def test_timeout_is_retryable_network(self) -> None:
        session = _session_raising(requests.ReadTimeout("read timed out"))

        outcome = _executor(session).execute(URL, Endpoint("/me"), response_type=object)

        assert isinstance(outcome, RetryableFailure)
        assert "timed out" in outcome.failure.message

    def test_other_request_exceptions_without_response_are_network(self) -> None:
        session = _session_raising(requests.exceptions.ChunkedEncodingError("broken"))

        outcome = _executor(session).execute(URL, Endpoint("/me"), response_type=object)

        assert isinstance(outcome, RetryableFailure)
        assert outcome.kind == "network"


class TestDescribeRequestException:
    def test_refused_from_nested_exception(self) -> None:
        error = requests.ConnectionError(ConnectionRefusedError(111, "Connection refused"))
        outcome = describe_request_exception(error)
        assert outcome.cause == "connection_refused"
        assert outcome.status_code is None

    def test_refused_from_message_text(self) -> None:
        error = requests.ConnectionError(
            "HTTPConnectionPool(host='10.0.2.2', port=3000): Max retries exceeded "
            "(Caused by NewConnectionError('Failed to establish a new connection: "
            "[Errno 111] Connection refused'))"
        )
        assert describe_request_exception(error).cause == "connection_refused"

    def test_dns_failure(self) -> None:
        error = requests.ConnectionError(socket.gaierror(-2, "Name or service not known"))
        assert describe_request_exception(error).cause == "dns_not_found"

    def test_dns_failure_from_message_text(self) -> None:
        error = requests.ConnectionError("Failed to resolve 'api.example.invalid'")
        assert describe_request_exception(error).cause == "dns_not_found"

    def test_generic_connection_failure(self) -> None:
        error = requests.ConnectionError("Connection aborted.")
        assert describe_request_exception(error).cause == "connection"

    def test_timeout(self) -> None:
        outcome = describe_request_exception(requests.ConnectTimeout("connect timed out"))
        assert outcome.timed_out is True
        assert outcome.cause == "timeout"

    def test_keeps_status_from_attached_response(self) -> None:
        response = requests.Response()
        response.status_code = 503
        error = requests.HTTPError("503 Server Error", response=response)
        outcome = describe_request_exception(error)
        assert outcome.status_code == 503
        assert outcome.cause == "other"
