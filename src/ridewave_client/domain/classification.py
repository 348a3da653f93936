"""Error classification over normalised transport outcomes.

Different transports report the same condition differently: a refused
connection may surface as an errno, an exception type or only a message. The
infrastructure layer reduces each attempt to a ``TransportOutcome`` and the
rules here decide the ``ErrorKind`` from that value alone.

Usage example:
    from ridewave_client.domain.classification import TransportOutcome, classify_transport

    kind = classify_transport(TransportOutcome(status_code=None, cause="connection_refused"))
    # "network"
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from .outcomes import ErrorKind

TransportCause = Literal[
    "none",
    "timeout",
    "connection_refused",
    "dns_not_found",
    "connection",
    "other",
]

NETWORK_CAUSES: frozenset[TransportCause] = frozenset(
    {"timeout", "connection_refused", "dns_not_found", "connection"}
)
AUTH_STATUSES = frozenset({401, 403})
RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({"network"})

_NETWORK_MESSAGE_RE = re.compile(r"network (error|request failed)", re.IGNORECASE)


def _empty_headers() -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class TransportOutcome:
    """What one attempt observed, independent of the HTTP library used."""

    status_code: int | None
    timed_out: bool = False
    cause: TransportCause = "none"
    message: str = ""
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=_empty_headers)

    @property
    def has_response(self) -> bool:
        return self.status_code is not None

    @property
    def is_success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300


def is_network_failure(outcome: TransportOutcome) -> bool:
    """Return True when the attempt never got a usable response.

    Each signal is sufficient on its own.
    """
    return (
        not outcome.has_response
        or outcome.timed_out
        or outcome.cause in NETWORK_CAUSES
        or bool(_NETWORK_MESSAGE_RE.search(outcome.message))
    )


def classify_status(status_code: int) -> ErrorKind | None:
    """Map an HTTP status to a failure kind; None for 2xx."""
    if 200 <= status_code < 300:
        return None
    if status_code in AUTH_STATUSES:
        return "auth_invalid"
    if 400 <= status_code < 500:
        return "client_error"
    # 5xx, plus 1xx/3xx that reach us unresolved
    return "server_error"


def classify_transport(outcome: TransportOutcome) -> ErrorKind | None:
    """Classify one attempt; None means the response can be decoded."""
    status_code = outcome.status_code
    if status_code is None or is_network_failure(outcome):
        return "network"
    return classify_status(status_code)


def classify_decode_failure() -> ErrorKind:
    return "malformed"


def is_retryable(kind: ErrorKind) -> bool:
    """Only network failures are worth another attempt."""
    return kind in RETRYABLE_KINDS
