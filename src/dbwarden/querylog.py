"""Audit log sink: one JSONL file per day, kept per working directory.

Files live under ``~/.dbwarden/logs/<project-slug>/<YYYY-MM-DD>.jsonl``.
The gateway only appends; ``dbwarden logs clean`` prunes old days.
"""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import structlog

DEFAULT_RETENTION_DAYS = 30
_LOG_ROOT = Path.home() / ".dbwarden" / "logs"
_DAY_FORMAT = "%Y-%m-%d"


def _project_slug() -> str:
    """Turn the working directory into a single path component."""
    return os.getcwd().replace("/", "-").lstrip("-")


def _project_dir() -> Path:
    return _LOG_ROOT / _project_slug()


def _today() -> date:
    return datetime.now(UTC).date()


def _day_of(log_file: Path) -> date | None:
    try:
        return datetime.strptime(log_file.stem, _DAY_FORMAT).date()
    except ValueError:
        return None


def append_entry(entry: dict[str, object]) -> None:
    """Append one audit entry to today's file, dropping ``None`` fields.

    A filesystem failure is reported on the console logger; the tool call
    that produced the entry still completes.
    """
    record = {key: value for key, value in entry.items() if value is not None}
    path = _project_dir() / f"{_today().strftime(_DAY_FORMAT)}.jsonl"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except OSError as e:
        structlog.get_logger().bind(logger="dbwarden.querylog").error(
            "audit file write failed", path=str(path), error=str(e),
        )


def cleanup_old_logs(*, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Delete day files older than ``retention_days``; return how many went.

    Files whose name is not a date are left alone. The project directory is
    removed once it is empty.
    """
    project_dir = _project_dir()
    if not project_dir.is_dir():
        return 0

    oldest_kept = _today() - timedelta(days=retention_days)
    stale = [
        log_file
        for log_file in project_dir.glob("*.jsonl")
        if (day := _day_of(log_file)) is not None and day < oldest_kept
    ]
    for log_file in stale:
        log_file.unlink()

    with contextlib.suppress(OSError):
        project_dir.rmdir()

    return len(stale)
