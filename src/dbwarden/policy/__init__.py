"""Policy engine: classify, guard, enrich and redact agent-supplied SQL."""

from __future__ import annotations

from dbwarden import messages
from dbwarden.policy._types import ALLOWED_DML, ClassificationResult, StatementType
from dbwarden.policy.classify import (
    classify_sql,
    is_dml_only,
    is_select_only,
    strip_comments,
    validate_sql_syntax,
)
from dbwarden.policy.enrich import add_limit_to_select, has_returning_clause, resolve_row_limit
from dbwarden.policy.redact import redact_sensitive_data
from dbwarden.policy.safety import (
    check_multiple_statements,
    check_read_root,
    check_writable_cte,
)

__all__ = [
    "ALLOWED_DML",
    "ClassificationResult",
    "StatementType",
    "add_limit_to_select",
    "check_multiple_statements",
    "check_read_root",
    "check_read_statement",
    "check_write_statement",
    "check_writable_cte",
    "classify_sql",
    "has_returning_clause",
    "is_dml_only",
    "is_select_only",
    "redact_sensitive_data",
    "resolve_row_limit",
    "strip_comments",
    "validate_sql_syntax",
]


def check_read_statement(
    sql: str,
    *,
    dialect: str | None = None,
    rejection: str = messages.NOT_SELECT,
) -> str | None:
    """Gate SQL bound for the read path. Returns a rejection message or None.

    Steps:
        1. Classifier: must be a valid SELECT
        2. Parsed root must be a query, not DML behind a CTE
        3. Single statement only
        4. No data-modifying CTEs
    """
    if not is_select_only(sql) or not check_read_root(sql, dialect):
        return rejection
    return check_multiple_statements(sql, dialect) or check_writable_cte(sql, dialect)


def check_write_statement(sql: str, *, dialect: str | None = None) -> str | None:
    """Gate SQL bound for the mutation path: exactly one INSERT/UPDATE/DELETE."""
    if not is_dml_only(sql):
        return messages.NOT_DML
    return check_multiple_statements(sql, dialect)
