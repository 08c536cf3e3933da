"""CLI entry point for `dbwarden`."""

from __future__ import annotations

import click

from dbwarden.cli.logs import logs
from dbwarden.cli.serve import serve
from dbwarden.cli.validate import validate


@click.group()
@click.version_option(package_name="dbwarden")
def main() -> None:
    """dbwarden: development-only database gateway for AI agents."""


main.add_command(serve)
main.add_command(validate)
main.add_command(logs)
