"""The `logs` command group: manage the JSONL audit files."""

from __future__ import annotations

import click

from dbwarden.querylog import DEFAULT_RETENTION_DAYS, cleanup_old_logs


@click.group("logs")
def logs() -> None:
    """Manage audit log files."""


@logs.command("clean")
@click.option(
    "--retention-days",
    type=click.IntRange(min=0),
    default=DEFAULT_RETENTION_DAYS,
    show_default=True,
    help="Delete files older than this many days.",
)
def clean(retention_days: int) -> None:
    """Delete audit files older than the retention window."""
    deleted = cleanup_old_logs(retention_days=retention_days)
    click.echo(f"Deleted {deleted} log file(s).")
