"""CLI for the Ridewave API client.

Commands:
- check-server: Validate the configured (or given) server URI locally
- login: Store an access token issued by the login flow
- logout: Remove the stored access token
- request: Send one request to the backend and print the JSON response
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich import print as rprint
from rich import print_json

from .application.client import ApiClient
from .application.messages import describe_failure
from .application.session import SessionManager
from .config import ClientConfig
from .config_file import load_client_config_file
from .domain.endpoint import Endpoint, normalise_method
from .exceptions import ApiError
from .infrastructure.token_store import TokenStoreAccessor


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: ClientConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    client: ApiClient
    session: SessionManager
    accessor: TokenStoreAccessor


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: ClientConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self, *, config: ClientConfig | None = None) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(config=config or self.config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the ridewave-api entry point.")


class InvalidJsonPayloadError(typer.BadParameter):
    """Raised when --data is not valid JSON."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"--data must be valid JSON: {detail}")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _parse_payload(data: str | None) -> object:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        raise InvalidJsonPayloadError(str(exc)) from exc


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Ridewave API client: validate the server, manage the session, send requests",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        config_path: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="TOML config file ([client] section) overriding environment values",
            ),
        ] = None,
    ) -> None:
        """Initialise CLI context."""
        config = ClientConfig.from_env()
        if config_path is not None:
            config = config.with_file_overrides(load_client_config_file(path=config_path))
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command(name="check-server")
    def check_server(
        ctx: typer.Context,
        uri: Annotated[
            str | None,
            typer.Argument(help="Server URI to check (default: configured RIDEWAVE_SERVER_URI)"),
        ] = None,
        allow_loopback: Annotated[
            bool | None,
            typer.Option(
                "--allow-loopback/--device",
                help="Accept localhost (desktop) or reject it (physical device)",
            ),
        ] = None,
    ) -> None:
        """Check that a server URI is usable before making any request."""
        state = _get_context(ctx)
        deps = state.build_dependencies()
        target = state.config.server_uri if uri is None else uri
        loopback = state.config.allow_loopback if allow_loopback is None else allow_loopback
        result = deps.accessor.validate(target, allow_loopback=loopback)
        if not result.valid:
            rprint(f"[red]✗ {result.diagnostic}[/red]")
            raise typer.Exit(code=1)
        rprint(f"[green]✓ Server URI OK:[/green] {target}")

    @app.command()
    def login(
        ctx: typer.Context,
        token: Annotated[str, typer.Argument(help="Access token issued by the login flow")],
    ) -> None:
        """Store an access token for later requests."""
        deps = _get_context(ctx).build_dependencies()
        deps.session.login(token).result()
        rprint("[green]✓ Access token stored[/green]")

    @app.command()
    def logout(ctx: typer.Context) -> None:
        """Remove the stored access token."""
        deps = _get_context(ctx).build_dependencies()
        deps.session.logout().result()
        rprint("[green]✓ Logged out[/green]")

    @app.command()
    def request(
        ctx: typer.Context,
        method: Annotated[str, typer.Argument(help="GET, POST, PATCH, PUT or DELETE")],
        path: Annotated[str, typer.Argument(help="Endpoint path, e.g. /driver/me")],
        data: Annotated[
            str | None,
            typer.Option("--data", "-d", help="JSON request body"),
        ] = None,
        anonymous: Annotated[
            bool,
            typer.Option(
                "--anonymous",
                help="Send without requiring a stored session (login, OTP endpoints)",
            ),
        ] = False,
        server_uri: Annotated[
            str | None,
            typer.Option("--server-uri", help="Override RIDEWAVE_SERVER_URI for this call"),
        ] = None,
        retries: Annotated[
            int | None,
            typer.Option("--retries", min=1, help="Override max attempts (default: 3)"),
        ] = None,
        timeout: Annotated[
            float | None,
            typer.Option(
                "--timeout",
                min=0.001,
                help="Per-attempt timeout in seconds (default: 15)",
            ),
        ] = None,
    ) -> None:
        """Send one request and print the decoded JSON response."""
        state = _get_context(ctx)
        config = state.config
        if server_uri is not None or retries is not None or timeout is not None:
            config = config.with_overrides(
                server_uri=server_uri,
                max_retries=retries,
                timeout_seconds=timeout,
            )
        deps = state.build_dependencies(config=config)

        try:
            endpoint = Endpoint(path, method=normalise_method(method), payload=_parse_payload(data))
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc

        try:
            if anonymous:
                result = deps.client.request_anonymous(endpoint)
            else:
                result = deps.session.run(lambda: deps.client.request(endpoint))
        except ApiError as exc:
            rprint(f"[red]✗ {exc.kind}:[/red] {describe_failure(exc)}")
            raise typer.Exit(code=1) from exc

        print_json(data=result)

    _ = (main, check_server, login, logout, request)

    return app
