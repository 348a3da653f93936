"""Token store implementations and the accessor the client reads through.

Usage example:
    from pathlib import Path

    from ridewave_client.infrastructure.token_store import FileTokenStore, TokenStoreAccessor

    accessor = TokenStoreAccessor(FileTokenStore(Path("~/.ridewave/tokens").expanduser()))
    accessor.save(access_token)  # returns immediately
    token = accessor.get()
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypedDict, override

from ..domain.server_uri import ServerUriValidation, validate_server_uri
from ..exceptions import TokenStoreDataError
from ..io_validation import IncomingDataError, validate_json_as
from ..observability import get_logger
from ..protocols import TokenStore

logger = get_logger("ridewave_client.infrastructure.token_store")

DEFAULT_TOKEN_KEY = "accessToken"


class _TokenDocument(TypedDict):
    key: str
    value: str


def _empty_values() -> dict[str, str]:
    return {}


@dataclass
class InMemoryTokenStore(TokenStore):
    """Process-local token store.

    Reads take no lock; each write swaps in a new dict so readers see either
    the old or the new mapping, never a partial one.
    """

    _values: dict[str, str] = field(default_factory=_empty_values)
    _write_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @override
    def get(self, key: str) -> str | None:
        return self._values.get(key)

    @override
    def set(self, key: str, value: str) -> None:
        with self._write_lock:
            self._values = {**self._values, key: value}

    @override
    def delete(self, key: str) -> None:
        with self._write_lock:
            if key in self._values:
                self._values = {k: v for k, v in self._values.items() if k != key}


@dataclass
class FileTokenStore(TokenStore):
    """File-backed token store: one JSON document per key.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a concurrent reader sees the old token or
    the new one.
    """

    store_dir: Path

    def __post_init__(self) -> None:
        self.store_dir = Path(self.store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        h = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.store_dir / f"{h}.json"

    @override
    def get(self, key: str) -> str | None:
        p = self._path(key)
        try:
            payload = p.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            document = validate_json_as(_TokenDocument, payload)
        except IncomingDataError as exc:
            raise TokenStoreDataError(str(p)) from exc
        return document["value"]

    @override
    def set(self, key: str, value: str) -> None:
        p = self._path(key)
        document: _TokenDocument = {"key": key, "value": value}
        fd, tmp_name = tempfile.mkstemp(dir=self.store_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, p)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @override
    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class TokenStoreAccessor:
    """Reads and writes the access token under a fixed key.

    Reads are synchronous and always hit the store, so a token rotated by the
    login flow is seen by the very next call. Writes are fire-and-forget: they
    run on a single background worker in submission order and return a
    ``Future`` the caller may ignore or wait on.
    """

    def __init__(self, store: TokenStore, *, key: str = DEFAULT_TOKEN_KEY) -> None:
        self.store = store
        self.key = key
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="token-store")
        self._pending: list[Future[None]] = []
        self._pending_lock = threading.Lock()

    def get(self) -> str | None:
        """Return the stored token unchanged, or None when absent or blank."""
        value = self.store.get(self.key)
        if value is None or not value.strip():
            return None
        return value

    def save(self, token: str) -> Future[None]:
        """Persist token in the background."""
        return self._submit(self.store.set, self.key, token)

    def clear(self) -> Future[None]:
        """Delete the stored token in the background."""
        return self._submit(self.store.delete, self.key)

    def flush(self) -> None:
        """Block until every write submitted so far has been applied."""
        with self._pending_lock:
            pending = list(self._pending)
        for future in pending:
            future.result()

    def close(self) -> None:
        self._writer.shutdown(wait=True)

    def validate(
        self, server_uri: str | None, *, allow_loopback: bool = False
    ) -> ServerUriValidation:
        """Check a server URI locally before any call is attempted."""
        return validate_server_uri(server_uri, allow_loopback=allow_loopback)

    def _submit(self, fn: Callable[..., None], *args: str) -> Future[None]:
        future: Future[None] = self._writer.submit(fn, *args)
        with self._pending_lock:
            self._pending.append(future)
        future.add_done_callback(self._on_write_done)
        return future

    def _on_write_done(self, future: Future[None]) -> None:
        with self._pending_lock:
            if future in self._pending:
                self._pending.remove(future)
        error = future.exception()
        if error is not None:
            logger.error("Token store write failed for key %r: %s", self.key, error)
