"""Endpoint descriptors and URL joining.

Usage example:
    from ridewave_client.domain.endpoint import Endpoint, join_url

    endpoint = Endpoint("driver/update-status", method="put", payload={"status": "active"})
    url = join_url("https://api.example.com/api/v1/", endpoint.path)
    # https://api.example.com/api/v1/driver/update-status
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, cast

from ..exceptions import EmptyEndpointPathError, UnsupportedMethodError

HttpMethod = Literal["GET", "POST", "PATCH", "PUT", "DELETE"]

HTTP_METHODS: tuple[HttpMethod, ...] = ("GET", "POST", "PATCH", "PUT", "DELETE")


def normalise_method(method: str) -> HttpMethod:
    """Return the upper-case method name, rejecting methods the client never issues."""
    upper = method.strip().upper()
    if upper not in HTTP_METHODS:
        raise UnsupportedMethodError(method)
    return cast(HttpMethod, upper)


def normalise_path(path: str) -> str:
    """Return path with exactly one leading separator."""
    stripped = path.strip()
    if not stripped:
        raise EmptyEndpointPathError()
    return "/" + stripped.lstrip("/")


def normalise_base_url(base_url: str) -> str:
    """Return base_url without trailing separators."""
    return base_url.strip().rstrip("/")


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and an endpoint path with exactly one separator."""
    return f"{normalise_base_url(base_url)}{normalise_path(path)}"


@dataclass(frozen=True)
class Endpoint:
    """A single backend call: where, how, and with what body.

    ``payload`` must be JSON-serialisable; ``None`` means no request body.
    """

    path: str
    method: HttpMethod = "GET"
    payload: object = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalise_path(self.path))
        object.__setattr__(self, "method", normalise_method(self.method))

    @property
    def has_payload(self) -> bool:
        return self.payload is not None
