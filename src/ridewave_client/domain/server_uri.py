"""Local validation of the configured server URI.

A base URL that is unset, lacks a scheme, or points at the loopback interface
cannot work from a physical device talking to a development machine. Catching
that locally turns a guaranteed network failure (and a wasted retry budget)
into an immediate diagnostic.

Usage example:
    from ridewave_client.domain.server_uri import validate_server_uri

    result = validate_server_uri("http://localhost:3000")
    result.valid       # False
    result.diagnostic  # "RIDEWAVE_SERVER_URI points to localhost. ..."
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from urllib.parse import urlsplit

SERVER_URI_SETTING = "RIDEWAVE_SERVER_URI"
ALLOWED_SCHEMES = ("http://", "https://")
LOOPBACK_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "ip6-localhost"})


@dataclass(frozen=True)
class ServerUriValidation:
    """Result of validating a server URI."""

    valid: bool
    diagnostic: str | None = None


_VALID = ServerUriValidation(valid=True)


def _host_of(uri: str) -> str:
    try:
        host = urlsplit(uri).hostname
    except ValueError:
        return ""
    return (host or "").lower()


def is_loopback_host(host: str) -> bool:
    """Return True for localhost names and loopback/unspecified addresses."""
    if host in LOOPBACK_HOSTNAMES or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_unspecified


def validate_server_uri(
    server_uri: str | None,
    *,
    allow_loopback: bool = False,
) -> ServerUriValidation:
    """Check that server_uri is usable before any request is attempted."""
    if server_uri is None or not server_uri.strip():
        return ServerUriValidation(
            valid=False,
            diagnostic=(
                f"{SERVER_URI_SETTING} is not set. Please add it to your environment or .env file."
            ),
        )

    uri = server_uri.strip()
    if not uri.lower().startswith(ALLOWED_SCHEMES):
        return ServerUriValidation(
            valid=False,
            diagnostic=f"{SERVER_URI_SETTING} must start with http:// or https://",
        )

    if not allow_loopback and is_loopback_host(_host_of(uri)):
        return ServerUriValidation(
            valid=False,
            diagnostic=(
                f"{SERVER_URI_SETTING} points to localhost. On physical devices, use your "
                "computer's LAN IP address (e.g., http://192.168.1.100:3000)."
            ),
        )

    return _VALID
