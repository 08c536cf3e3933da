"""Query enrichment: auto-LIMIT injection and result-shape hints."""

from __future__ import annotations

import re

DEFAULT_LIMIT = 200
MAX_ROWS = 2000

_TRAILING_SEMICOLON = re.compile(r";\s*$")


def add_limit_to_select(sql: str, limit: int) -> str:
    """Append ``LIMIT <limit>`` to a SELECT that has none.

    Any occurrence of the word LIMIT (case-insensitive) counts as an existing
    limit, and an existing limit is never lowered.
    """
    if "LIMIT" in sql.upper():
        return sql
    clean = _TRAILING_SEMICOLON.sub("", sql)
    return f"{clean} LIMIT {limit}"


def resolve_row_limit(
    requested: int | None,
    *,
    default: int = DEFAULT_LIMIT,
    maximum: int = MAX_ROWS,
) -> int:
    """Pick the effective row limit: requested or default, capped at maximum."""
    limit = requested if requested else default
    return max(1, min(limit, maximum))


def has_returning_clause(sql: str) -> bool:
    """Substring check for RETURNING.

    Also true for a literal that contains the word, e.g.
    ``UPDATE t SET note = 'returning soon'``.
    """
    return "RETURNING" in sql.upper()
