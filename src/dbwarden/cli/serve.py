"""The `serve` command: run the MCP database server over streamable HTTP."""

from __future__ import annotations

import click

from dbwarden.audit import setup_logging
from dbwarden.config import ConfigError, GatewayConfig
from dbwarden.server import run_server


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=3000, show_default=True, help="Port to listen on.")
@click.option("--path", default=None, help="Mount path (default /api/mcp).")
@click.option("--verbose", is_flag=True, help="Debug logging.")
def serve(host: str, port: int, path: str | None, verbose: bool) -> None:
    """Serve the database tools, configured from environment variables."""
    setup_logging(verbose=verbose)
    try:
        config = GatewayConfig.from_env()
    except ConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from None
    if not config.database_url:
        click.echo("error: DATABASE_URL is not set", err=True)
        raise SystemExit(1)

    run_server(config, host=host, port=port, path=path)
