"""Exports for test fakes."""

from .http import ExecutedCall, FakeExecutor
from .resilience import FakeSleeper
from .token_store import RecordingTokenStore

__all__ = [
    "ExecutedCall",
    "FakeExecutor",
    "FakeSleeper",
    "RecordingTokenStore",
]
