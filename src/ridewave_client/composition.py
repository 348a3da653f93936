"""Composition root for wiring client and CLI dependencies."""

from __future__ import annotations

from pathlib import Path

import requests

from .application.client import ApiClient
from .application.session import SessionManager
from .cli import CliDependencies, create_app
from .config import ClientConfig
from .domain.retry import RetryPolicy
from .infrastructure import (
    EventSleeper,
    FileTokenStore,
    RequestsExecutor,
    RetryCoordinator,
    TokenStoreAccessor,
)
from .protocols import Sleeper, TokenStore


def build_token_accessor(
    config: ClientConfig, *, store: TokenStore | None = None
) -> TokenStoreAccessor:
    """Build the accessor over the configured token store."""
    token_store = store or FileTokenStore(Path(config.token_store_dir).expanduser())
    return TokenStoreAccessor(token_store, key=config.token_key)


def build_api_client(
    config: ClientConfig,
    *,
    accessor: TokenStoreAccessor | None = None,
    session: requests.Session | None = None,
    sleeper: Sleeper | None = None,
) -> ApiClient:
    """Build an ApiClient from configuration.

    Args:
        config: Client configuration (base URL, timeout, retry bounds, token store).
        accessor: Token accessor to share with other components; built from config if omitted.
        session: requests session to send through; a new one if omitted.
        sleeper: Inter-retry sleeper; an interruptible real-time sleeper if omitted.
    """
    executor = RequestsExecutor(
        session=session or requests.Session(),
        timeout_seconds=config.timeout_seconds,
    )
    coordinator = RetryCoordinator(
        policy=RetryPolicy(
            max_attempts=config.max_retries,
            base_delay_seconds=config.retry_delay_seconds,
        ),
        sleeper=sleeper or EventSleeper(),
    )
    return ApiClient(
        base_url=config.server_uri,
        accessor=accessor or build_token_accessor(config),
        executor=executor,
        coordinator=coordinator,
        allow_loopback=config.allow_loopback,
    )


def build_cli_dependencies(*, config: ClientConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands."""
    accessor = build_token_accessor(config)
    client = build_api_client(config, accessor=accessor)
    return CliDependencies(
        client=client,
        session=SessionManager(accessor),
        accessor=accessor,
    )


app = create_app(build_cli_dependencies)
