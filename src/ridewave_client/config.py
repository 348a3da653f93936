"""Centralised, injectable configuration for the Ridewave API client."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import ClientConfigFile

DEFAULT_SERVER_URI = "http://localhost:4000/api/v1"
DEFAULT_TOKEN_STORE_DIR = "~/.ridewave/tokens"


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class PositiveNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


class BooleanEnvVarError(ValueError):
    """Raised when an environment variable must be a supported boolean."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a boolean value (true/false, 1/0, yes/no, on/off).")


class InvalidOverrideError(ValueError):
    """Raised when an explicit override is outside its allowed range."""

    def __init__(self, name: str, requirement: str) -> None:
        super().__init__(f"{name} must be {requirement}.")


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for the API client.

    Load from environment with `ClientConfig.from_env()` or construct directly for testing.
    Every field has a default, so `ClientConfig()` is a working development setup.
    """

    # Backend
    server_uri: str = DEFAULT_SERVER_URI
    allow_loopback: bool = True  # device builds set RIDEWAVE_ALLOW_LOOPBACK=false

    # Resilience
    timeout_seconds: float = 15.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    # Token store
    token_key: str = "accessToken"
    token_store_dir: str = DEFAULT_TOKEN_STORE_DIR

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            ClientConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            server_uri=os.getenv("RIDEWAVE_SERVER_URI", DEFAULT_SERVER_URI).strip(),
            allow_loopback=_parse_bool(
                os.getenv("RIDEWAVE_ALLOW_LOOPBACK", "true"), env_name="RIDEWAVE_ALLOW_LOOPBACK"
            ),
            timeout_seconds=_parse_positive_float(
                os.getenv("RIDEWAVE_TIMEOUT_SECONDS", "15"), env_name="RIDEWAVE_TIMEOUT_SECONDS"
            ),
            max_retries=_parse_positive_int(
                os.getenv("RIDEWAVE_MAX_RETRIES", "3"), env_name="RIDEWAVE_MAX_RETRIES"
            ),
            retry_delay_seconds=_parse_positive_float(
                os.getenv("RIDEWAVE_RETRY_DELAY_SECONDS", "1.0"),
                env_name="RIDEWAVE_RETRY_DELAY_SECONDS",
            ),
            token_key=os.getenv("RIDEWAVE_TOKEN_KEY", "accessToken").strip() or "accessToken",
            token_store_dir=os.getenv("RIDEWAVE_TOKEN_STORE_DIR", DEFAULT_TOKEN_STORE_DIR).strip()
            or DEFAULT_TOKEN_STORE_DIR,
        )

    def with_overrides(
        self,
        *,
        server_uri: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        retry_delay_seconds: float | None = None,
        allow_loopback: bool | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise InvalidOverrideError("timeout_seconds", "a positive number")
        if max_retries is not None and max_retries < 1:
            raise InvalidOverrideError("max_retries", "a positive integer")
        if retry_delay_seconds is not None and retry_delay_seconds <= 0:
            raise InvalidOverrideError("retry_delay_seconds", "a positive number")
        return replace(
            self,
            server_uri=self.server_uri if server_uri is None else server_uri.strip(),
            timeout_seconds=self.timeout_seconds if timeout_seconds is None else timeout_seconds,
            max_retries=self.max_retries if max_retries is None else max_retries,
            retry_delay_seconds=self.retry_delay_seconds
            if retry_delay_seconds is None
            else retry_delay_seconds,
            allow_loopback=self.allow_loopback if allow_loopback is None else allow_loopback,
        )

    def with_file_overrides(self, file_config: ClientConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            server_uri=self.server_uri
            if file_config.server_uri is None
            else file_config.server_uri,
            allow_loopback=self.allow_loopback
            if file_config.allow_loopback is None
            else file_config.allow_loopback,
            timeout_seconds=self.timeout_seconds
            if file_config.timeout_seconds is None
            else file_config.timeout_seconds,
            max_retries=self.max_retries
            if file_config.max_retries is None
            else file_config.max_retries,
            retry_delay_seconds=self.retry_delay_seconds
            if file_config.retry_delay_seconds is None
            else file_config.retry_delay_seconds,
            token_key=self.token_key if file_config.token_key is None else file_config.token_key,
            token_store_dir=self.token_store_dir
            if file_config.token_store_dir is None
            else file_config.token_store_dir,
        )


def _parse_positive_int(value: str, *, env_name: str) -> int:
    """Parse a positive integer from an environment variable."""
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_positive_float(value: str, *, env_name: str) -> float:
    """Parse a positive number from an environment variable."""
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed <= 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_bool(value: str, *, env_name: str) -> bool:
    """Parse a boolean from an environment variable."""
    text = value.strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise BooleanEnvVarError(env_name)
