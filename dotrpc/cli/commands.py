"""CLI commands for dotrpc.

``serve`` mounts handlers from a Python module behind FastAPI/uvicorn,
``methods`` lists what such a module registers and ``call`` sends one
request to a running endpoint.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dotrpc import __logo__, __version__
from dotrpc.cli.shared.logging_utils import configure_logging
from dotrpc.cli.shared.serve_utils import HandlerModuleError, endpoint_url, load_handler_module, port_is_busy
from dotrpc.config.access import get_config
from dotrpc.config.schema import Config
from dotrpc.rpc.server import Server
from dotrpc.utils.exceptions import TransportError

app = typer.Typer(
    name="dotrpc",
    help=f"{__logo__} dotrpc - JSON-RPC 2.0 server and client",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} dotrpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """dotrpc - JSON-RPC 2.0 server and client."""
    pass


def _load_config(config_path: Path | None) -> Config:
    try:
        return get_config(config_path=config_path)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e


def build_server(module_name: str, config: Config) -> Server:
    """Import ``module_name`` and let its ``register_handlers(server)`` fill a Server."""
    try:
        module = load_handler_module(module_name)
    except HandlerModuleError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    server = Server(config.server)
    module.register_handlers(server)
    return server


def parse_param(value: str) -> Any:
    """Read a CLI value as JSON, falling back to the plain string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def parse_named(pairs: list[str]) -> dict[str, Any]:
    named: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--named")
        named[key] = parse_param(value)
    return named


# ============================================================================
# Server
# ============================================================================


@app.command()
def serve(
    module: str = typer.Option(..., "--module", "-m", help="Module exposing register_handlers(server)"),
    host: str | None = typer.Option(None, "--host", "-h", help="Bind host (default from config)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default from config)"),
    path: str | None = typer.Option(None, "--path", help="Endpoint path (default from config)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
):
    """Serve the handlers of a module over HTTP."""
    config = _load_config(config_path)
    host = host or config.http.host
    port = port or config.http.port
    path = path or config.http.path

    if port_is_busy(host, port):
        console.print(
            f"[red]Port {port} is already in use.[/red] "
            f"Use [cyan]--port[/cyan] to specify another port (current: {host}:{port})."
        )
        raise typer.Exit(1)

    log_path = configure_logging(config.logging, verbose=verbose)
    server = build_server(module, config)

    from dotrpc.api.http import create_app

    api_app = create_app(server, path)

    import uvicorn

    uvicorn_config = uvicorn.Config(
        api_app,
        host=host,
        port=port,
        log_level="debug" if verbose else "info",
    )
    api_server = uvicorn.Server(uvicorn_config)
    console.print(f"{__logo__} Serving {len(server.list_methods())} method(s) on {endpoint_url(host, port, path)}")
    if log_path:
        console.print(f"[dim]Logs: {log_path}[/dim]")
    api_server.run()


@app.command()
def methods(
    module: str = typer.Option(..., "--module", "-m", help="Module exposing register_handlers(server)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """List the methods a handler module registers."""
    config = _load_config(config_path)
    server = build_server(module, config)
    names = server.list_methods()
    if not names:
        console.print("[yellow]No methods registered.[/yellow]")
        return

    table = Table(title="Registered Methods")
    table.add_column("Method", style="cyan")
    table.add_column("Parameters")
    for name in names:
        descriptor = server.resolve(name)
        params = [p.name if not p.optional else f"{p.name}={p.default!r}" for p in descriptor.parameters]
        if descriptor.variadic:
            params.append("*args")
        table.add_row(name, escape(", ".join(params)) or "-")
    console.print(table)


# ============================================================================
# Client
# ============================================================================


@app.command()
def call(
    method: str = typer.Argument(..., help="Dotted method name, e.g. math.sum"),
    params: list[str] | None = typer.Argument(None, help="Positional params (parsed as JSON when possible)"),
    named: list[str] | None = typer.Option(None, "--named", "-n", help="Named param key=value (repeatable)"),
    endpoint: str | None = typer.Option(None, "--endpoint", "-e", help="Endpoint URL (default from config)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    raw: bool = typer.Option(False, "--raw", help="Print the raw response body"),
):
    """Call a method on a running endpoint and print the result."""
    from dotrpc.client.client import Client

    config = _load_config(config_path)
    client_config = config.client.model_copy(update={"debug": raw})
    if timeout is not None:
        client_config.timeout_seconds = timeout
    client = Client(endpoint or client_config.endpoint, config=client_config)

    positional = [parse_param(value) for value in params or []]
    keywords = parse_named(named or [])
    if positional and keywords:
        console.print("[red]Use either positional params or --named, not both.[/red]")
        raise typer.Exit(1)

    try:
        result = client.call(method, *positional, **keywords)
    except TransportError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1) from e

    if raw:
        console.print(client.last_response or "", markup=False, highlight=False)
    elif result.error is not None:
        console.print(f"[red]Error {result.error.code}: {escape(result.error.message)}[/red]")
    else:
        console.print_json(data=result.result)
    if result.error is not None:
        raise typer.Exit(1)


@app.command()
def version():
    """Show the dotrpc version."""
    console.print(f"{__logo__} dotrpc v{__version__}")


if __name__ == "__main__":
    app()
