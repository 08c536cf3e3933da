"""Statement-level safety checks on the parsed SQL AST.

These run after classification on the tools that execute SQL. They only
ever reject: SQL that sqlglot cannot parse passes through here and is left
to the database to refuse.
"""

from __future__ import annotations

import sqlglot
from sqlglot import exp

from dbwarden import messages

_DML_TYPES = (exp.Insert, exp.Update, exp.Delete, exp.Merge)
_READ_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)


def _parse(sql: str, dialect: str | None) -> list[exp.Expression] | None:
    try:
        statements = sqlglot.parse(sql, dialect=dialect)
    except sqlglot.errors.SqlglotError:
        return None
    # Filter out empty expressions (trailing semicolons)
    return [s for s in statements if s is not None]


def check_multiple_statements(sql: str, dialect: str | None = None) -> str | None:
    """Block SQL containing more than one statement (possible injection)."""
    statements = _parse(sql, dialect)
    if statements is None or len(statements) <= 1:
        return None
    return messages.MULTIPLE_STATEMENTS


def check_writable_cte(sql: str, dialect: str | None = None) -> str | None:
    """Block read statements whose CTEs modify data.

    ``WITH d AS (DELETE FROM t RETURNING *) SELECT * FROM d`` starts with
    WITH and contains a SELECT, so it classifies as a read.
    """
    statements = _parse(sql, dialect)
    if not statements:
        return None
    for statement in statements:
        for cte in statement.find_all(exp.CTE):
            if isinstance(cte.this, _DML_TYPES):
                return messages.WRITABLE_CTE
    return None


def check_read_root(sql: str, dialect: str | None = None) -> bool:
    """True when every parsed statement is a plain query.

    ``WITH x AS (SELECT 1) DELETE FROM t`` starts with WITH and contains a
    SELECT, but its root is a Delete. ``SELECT ... INTO`` creates a table.
    """
    statements = _parse(sql, dialect)
    if statements is None:
        return True
    return all(
        isinstance(statement, _READ_TYPES) and not statement.args.get("into")
        for statement in statements
    )
