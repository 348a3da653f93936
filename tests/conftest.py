"""Pytest fixtures shared across the suite.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket
from collections.abc import Iterator

import pytest

from ridewave_client.infrastructure.token_store import InMemoryTokenStore, TokenStoreAccessor
from tests.fakes import FakeExecutor, FakeSleeper, RecordingTokenStore
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    _ = (self, kwargs)
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Block all network access in tests.

    This fixture runs automatically for all tests and prevents any real
    network connections. Tests that need HTTP should use FakeExecutor or a
    MagicMock session.

    If you need E2E tests with real network access, mark them with:
        @pytest.mark.e2e
    and run them separately with: pytest -m e2e
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture
def token_store() -> RecordingTokenStore:
    """Provide an in-memory token store that records reads."""
    return RecordingTokenStore()


@pytest.fixture
def accessor(token_store: RecordingTokenStore) -> Iterator[TokenStoreAccessor]:
    """Provide a token accessor over the recording store."""
    token_accessor = TokenStoreAccessor(token_store)
    yield token_accessor
    token_accessor.close()


@pytest.fixture
def logged_in_accessor() -> Iterator[TokenStoreAccessor]:
    """Provide a token accessor with a stored access token."""
    store = InMemoryTokenStore()
    store.set("accessToken", "tok-123")
    token_accessor = TokenStoreAccessor(store)
    yield token_accessor
    token_accessor.close()


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """Provide a scripted request executor."""
    return FakeExecutor()


@pytest.fixture
def fake_sleeper() -> FakeSleeper:
    """Provide a sleeper that records waits without sleeping."""
    return FakeSleeper()
