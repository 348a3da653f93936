"""Pure domain logic: endpoints, outcomes, classification and retry decisions."""

from .classification import TransportOutcome, classify_status, classify_transport, is_retryable
from .endpoint import Endpoint, HttpMethod, join_url
from .outcomes import (
    ApiFailure,
    AttemptOutcome,
    Cancelled,
    ErrorKind,
    RetryableFailure,
    Success,
    TerminalFailure,
)
from .retry import RetryDecision, RetryPolicy, decide_retry
from .server_uri import ServerUriValidation, validate_server_uri

__all__ = [
    "ApiFailure",
    "AttemptOutcome",
    "Cancelled",
    "Endpoint",
    "ErrorKind",
    "HttpMethod",
    "RetryDecision",
    "RetryPolicy",
    "RetryableFailure",
    "ServerUriValidation",
    "Success",
    "TerminalFailure",
    "TransportOutcome",
    "classify_status",
    "classify_transport",
    "decide_retry",
    "is_retryable",
    "join_url",
    "validate_server_uri",
]
