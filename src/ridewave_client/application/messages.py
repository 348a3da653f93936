"""Human-readable messages for failures shown to end users."""

from __future__ import annotations

from ..domain.outcomes import ApiFailure
from ..domain.server_uri import SERVER_URI_SETTING
from ..exceptions import ApiError

NETWORK_HINT = (
    "Network error. Please check:\n"
    "1. Server is running\n"
    f"2. {SERVER_URI_SETTING} is correct\n"
    "3. Device has internet connection"
)
UNEXPECTED_ERROR = "An unexpected error occurred"


def describe_failure(error: ApiError | ApiFailure | BaseException) -> str:
    """Return a message suitable for showing to the user."""
    if isinstance(error, (ApiError, ApiFailure)):
        if error.kind == "network":
            return NETWORK_HINT
        if error.status_code is not None:
            return error.message or f"Server error: {error.status_code}"
        return error.message or UNEXPECTED_ERROR
    return str(error) or UNEXPECTED_ERROR
