"""The `validate` command: classify SQL offline, without touching a database."""

from __future__ import annotations

import click

from dbwarden.cli._output import format_classification
from dbwarden.policy import validate_sql_syntax


@click.command()
@click.argument("sql")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def validate(sql: str, output_format: str) -> None:
    """Classify SQL the way the gateway would, without executing it."""
    result = validate_sql_syntax(sql)
    click.echo(format_classification(result, output_format=output_format))
    if not result.valid:
        raise SystemExit(1)
