"""Tests for caller-side session policy."""

from __future__ import annotations

from pathlib import Path

import pytest

from ridewave_client.application.session import SessionManager
from ridewave_client.domain.outcomes import Success, terminal
from ridewave_client.exceptions import AuthenticationFailedError, NetworkError
from ridewave_client.infrastructure.token_store import FileTokenStore, TokenStoreAccessor
from tests.fakes import RecordingTokenStore


@pytest.fixture
def store() -> RecordingTokenStore:
    return RecordingTokenStore(values={"accessToken": "tok-123"})


@pytest.fixture
def session(store: RecordingTokenStore) -> SessionManager:
    return SessionManager(TokenStoreAccessor(store))


def _rejected() -> int:
    raise AuthenticationFailedError.for_status(401)


def test_login_and_logout() -> None:
    session = SessionManager(TokenStoreAccessor(RecordingTokenStore()))
    assert session.is_logged_in() is False

    session.login("fresh").result(timeout=5)
    assert session.is_logged_in() is True

    session.logout().result(timeout=5)
    assert session.is_logged_in() is False


def test_single_rejection_keeps_token(
    session: SessionManager, store: RecordingTokenStore
) -> None:
    cleared = session.record_kind("auth_invalid")

    assert cleared is False
    assert store.values["accessToken"] == "tok-123"
    assert session.consecutive_auth_failures == 1


def test_repeated_rejections_clear_token(
    session: SessionManager, store: RecordingTokenStore
) -> None:
    session.record_kind("auth_invalid")
    cleared = session.record_kind("auth_invalid")
    session.accessor.flush()

    assert cleared is True
    assert "accessToken" not in store.values
    assert session.consecutive_auth_failures == 0


def test_success_resets_the_counter(session: SessionManager, store: RecordingTokenStore) -> None:
    session.record(terminal("auth_invalid", "rejected", 401))
    session.record(Success({"ok": True}))
    session.record(terminal("auth_invalid", "rejected", 401))
    session.accessor.flush()

    assert store.values["accessToken"] == "tok-123"
    assert session.consecutive_auth_failures == 1


def test_other_failures_do_not_count(session: SessionManager) -> None:
    session.record_kind("auth_invalid")
    session.record_kind("network")
    session.record_kind("server_error")

    assert session.consecutive_auth_failures == 1


def test_login_resets_counter(session: SessionManager) -> None:
    session.record_kind("auth_invalid")
    session.login("new-token").result(timeout=5)

    assert session.consecutive_auth_failures == 0


def test_run_records_and_reraises(session: SessionManager, store: RecordingTokenStore) -> None:
    with pytest.raises(AuthenticationFailedError):
        session.run(_rejected)
    with pytest.raises(AuthenticationFailedError):
        session.run(_rejected)
    session.accessor.flush()

    assert "accessToken" not in store.values


def test_run_returns_result_and_resets(session: SessionManager) -> None:
    session.record_kind("auth_invalid")

    assert session.run(lambda: {"rides": []}) == {"rides": []}
    assert session.consecutive_auth_failures == 0


def test_run_ignores_non_auth_errors(session: SessionManager) -> None:
    def refused() -> None:
        raise NetworkError("Connection refused")

    with pytest.raises(NetworkError):
        session.run(refused)
    assert session.consecutive_auth_failures == 0


def test_custom_threshold(store: RecordingTokenStore) -> None:
    session = SessionManager(TokenStoreAccessor(store), max_auth_failures=1)

    assert session.record_kind("auth_invalid") is True
    session.accessor.flush()
    assert "accessToken" not in store.values


def test_unreadable_token_is_not_logged_in(tmp_path: Path) -> None:
    store = FileTokenStore(tmp_path)
    store.set("accessToken", "tok-123")
    (token_file,) = tmp_path.iterdir()
    token_file.write_text("not json", encoding="utf-8")
    session = SessionManager(TokenStoreAccessor(store))

    assert session.is_logged_in() is False
