"""Attempt outcomes and classified failures.

Every call ends in exactly one of four variants: ``Success`` carries the
decoded body; ``RetryableFailure`` and ``TerminalFailure`` carry an
``ApiFailure``; ``Cancelled`` reports that the caller gave up before the call
finished.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

ErrorKind = Literal[
    "network",
    "auth_invalid",
    "client_error",
    "server_error",
    "malformed",
    "not_authenticated",
    "cancelled",
    "configuration",
]


@dataclass(frozen=True)
class ApiFailure:
    """A classified failure: what went wrong, in words, and the status if any."""

    kind: ErrorKind
    message: str
    status_code: int | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Success[T]:
    value: T
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class RetryableFailure:
    failure: ApiFailure

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.failure.kind


@dataclass(frozen=True)
class TerminalFailure:
    failure: ApiFailure

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.failure.kind


@dataclass(frozen=True)
class Cancelled:
    failure: ApiFailure = field(
        default_factory=lambda: ApiFailure(kind="cancelled", message="Request was cancelled.")
    )

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.failure.kind


type Failure = RetryableFailure | TerminalFailure | Cancelled
type AttemptOutcome[T] = Success[T] | RetryableFailure | TerminalFailure | Cancelled


def terminal(kind: ErrorKind, message: str, status_code: int | None = None) -> TerminalFailure:
    """Shorthand for a terminal failure with no underlying exception."""
    return TerminalFailure(ApiFailure(kind=kind, message=message, status_code=status_code))
