"""Concrete infrastructure implementations and shared helpers."""

from .http import (
    RequestsExecutor,
    build_headers,
    describe_request_exception,
    describe_response,
)
from .resilience import CancellationToken, EventSleeper, RetryCoordinator
from .token_store import FileTokenStore, InMemoryTokenStore, TokenStoreAccessor

__all__ = [
    "CancellationToken",
    "EventSleeper",
    "FileTokenStore",
    "InMemoryTokenStore",
    "RequestsExecutor",
    "RetryCoordinator",
    "TokenStoreAccessor",
    "build_headers",
    "describe_request_exception",
    "describe_response",
]
