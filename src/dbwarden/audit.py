"""Audit logging for every gateway decision and executed statement.

Console output goes through structlog on stderr (stdout is reserved for
transports that speak over it); every entry is also appended to the daily
JSONL audit file in ``dbwarden.querylog``. Nothing here is ever read back.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Sequence
from dataclasses import asdict, dataclass, replace
from datetime import UTC, datetime
from typing import Any

import structlog

from dbwarden import querylog
from dbwarden.policy.redact import redact_sensitive_data

LOG_PREFIX = "[MCP_DB]"
MAX_SQL_LOG_LENGTH = 500
MAX_PARAM_LOG_LENGTH = 50

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _LazyStderrFactory:
    """Resolve sys.stderr when each logger is created, not at configure() time."""

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog for the gateway.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
    """
    log_level = "debug" if verbose else "info"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LOG_LEVELS[log_level]),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger() -> Any:
    return structlog.get_logger().bind(logger="dbwarden.audit")


@dataclass
class LogEntry:
    timestamp: str
    tool: str
    statement_class: str | None = None
    duration_ms: int | None = None
    row_count: int | None = None
    error: str | None = None
    reason: str | None = None
    request_ip: str | None = None


def format_entry(entry: LogEntry) -> str:
    """Render an entry as ``[MCP_DB] [ts] [tool] [...]``, only present fields."""
    parts = [LOG_PREFIX, f"[{entry.timestamp}]", f"[{entry.tool}]"]
    if entry.statement_class:
        parts.append(f"[{entry.statement_class}]")
    if entry.duration_ms is not None:
        parts.append(f"[{entry.duration_ms}ms]")
    if entry.row_count is not None:
        parts.append(f"[{entry.row_count} rows]")
    if entry.error:
        parts.append(f"[ERROR: {entry.error}]")
    if entry.reason:
        parts.append(f"[Reason: {entry.reason}]")
    if entry.request_ip:
        parts.append(f"[IP: {entry.request_ip}]")
    return " ".join(parts)


def log_operation(entry: LogEntry) -> None:
    """Record one tool decision or execution.

    Error text is redacted like SQL before it reaches either sink.
    """
    if entry.error:
        entry = replace(entry, error=redact_sensitive_data(entry.error))
    log = get_logger()
    line = format_entry(entry)
    if entry.error:
        log.warning(line, tool=entry.tool)
    else:
        log.info(line, tool=entry.tool)
    querylog.append_entry({"event": "operation", **asdict(entry)})


def truncate_sql(sql: str) -> str:
    redacted = redact_sensitive_data(sql)
    if len(redacted) > MAX_SQL_LOG_LENGTH:
        return redacted[: MAX_SQL_LOG_LENGTH - 3] + "..."
    return redacted


def truncate_params(params: Sequence[Any]) -> list[Any]:
    limit = MAX_PARAM_LOG_LENGTH
    return [
        p[: limit - 3] + "..." if isinstance(p, str) and len(p) > limit else p
        for p in params
    ]


def log_sql(sql: str, params: Sequence[Any] | None = None) -> None:
    """Log a statement about to run, redacted and truncated."""
    log = get_logger()
    statement = truncate_sql(sql)
    log.info(f"{LOG_PREFIX} SQL: {statement}")
    shown_params = truncate_params(params) if params else None
    if shown_params:
        log.info(f"{LOG_PREFIX} Params: {shown_params!r}")
    querylog.append_entry({
        "event": "sql",
        "timestamp": get_timestamp(),
        "sql": statement,
        "params": shown_params,
    })


def log_mutation_reason(reason: str) -> None:
    get_logger().info(f"{LOG_PREFIX} Mutation reason: {reason}")


def log_access_denied(reason: str, request_ip: str | None = None) -> None:
    suffix = f" [IP: {request_ip}]" if request_ip else ""
    get_logger().warning(f"{LOG_PREFIX} Access Denied: {reason}{suffix}")
    querylog.append_entry({
        "event": "access_denied",
        "timestamp": get_timestamp(),
        "reason": reason,
        "request_ip": request_ip,
    })


def get_timestamp() -> str:
    """Current time as ISO-8601 UTC."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def measure_duration(start: float) -> int:
    """Milliseconds since ``start`` (a ``time.perf_counter()`` reading)."""
    return round((time.perf_counter() - start) * 1000)
