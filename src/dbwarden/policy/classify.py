"""Classify SQL statements by leading keyword and scan for forbidden constructs."""

from __future__ import annotations

import re

from dbwarden import messages
from dbwarden.policy._types import ALLOWED_DML, ClassificationResult, StatementType

_LINE_COMMENT = re.compile(r"--.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)

# Checked in order against the raw text; first match wins. A leading comment
# therefore yields UNKNOWN.
_LEADING_KEYWORDS = [
    (re.compile(rf"^\s*{t.value}\s", re.IGNORECASE), t)
    for t in (
        StatementType.SELECT,
        StatementType.INSERT,
        StatementType.UPDATE,
        StatementType.DELETE,
        StatementType.CREATE,
        StatementType.ALTER,
        StatementType.DROP,
        StatementType.TRUNCATE,
        StatementType.GRANT,
        StatementType.REVOKE,
    )
]

_LEADING_WITH = re.compile(r"^\s*WITH\s", re.IGNORECASE)
_CTE_SELECT = re.compile(r"WITH\s+.*\s+SELECT\s", re.IGNORECASE | re.DOTALL)
_LEADING_EXPLAIN = re.compile(r"^\s*EXPLAIN\s", re.IGNORECASE)
_EXPLAIN_SELECT = re.compile(r"EXPLAIN\s+(?:.*\s)?SELECT\s", re.IGNORECASE | re.DOTALL)

_OBJECT_TYPES = "TABLE|DATABASE|SCHEMA|VIEW|INDEX|FUNCTION|PROCEDURE|TRIGGER|ROLE|USER"

# Matched anywhere in the statement, including subqueries, CTEs and literals.
_DENY_PATTERNS = [
    re.compile(rf"\bCREATE\s+({_OBJECT_TYPES})\b", re.IGNORECASE),
    re.compile(rf"\bALTER\s+({_OBJECT_TYPES})\b", re.IGNORECASE),
    re.compile(rf"\bDROP\s+({_OBJECT_TYPES}|CASCADE)\b", re.IGNORECASE),
    re.compile(r"\bTRUNCATE\s+TABLE\b", re.IGNORECASE),
    re.compile(r"\bGRANT\s+", re.IGNORECASE),
    re.compile(r"\bREVOKE\s+", re.IGNORECASE),
    re.compile(r"\bCOPY\s+.*\s+(FROM|TO)\s+PROGRAM\b", re.IGNORECASE | re.DOTALL),
    re.compile(r"\bEXECUTE\s+", re.IGNORECASE),
    re.compile(r"\bSET\s+ROLE\b", re.IGNORECASE),
    re.compile(r"\bRESET\s+ROLE\b", re.IGNORECASE),
    re.compile(r"\bCREATE\s+EXTENSION\b", re.IGNORECASE),
    re.compile(r"\bDROP\s+EXTENSION\b", re.IGNORECASE),
]


def strip_comments(sql: str) -> str:
    """Remove ``--`` and ``/* */`` comments and surrounding whitespace."""
    without_lines = _LINE_COMMENT.sub("", sql)
    return _BLOCK_COMMENT.sub("", without_lines).strip()


def _leading_type(raw_upper: str) -> StatementType:
    for pattern, stmt_type in _LEADING_KEYWORDS:
        if pattern.match(raw_upper):
            return stmt_type
    if _LEADING_WITH.match(raw_upper):
        if _CTE_SELECT.search(raw_upper):
            return StatementType.SELECT
    elif _LEADING_EXPLAIN.match(raw_upper):
        if _EXPLAIN_SELECT.search(raw_upper):
            return StatementType.SELECT
    return StatementType.UNKNOWN


def classify_sql(sql: str) -> ClassificationResult:
    """Classify raw SQL text.

    Security-critical: the leading keyword of the raw text decides the
    statement type, so SQL that opens with a comment is UNKNOWN. A deny-list
    match anywhere in the comment-free text invalidates the statement no
    matter what it starts with, so ``SELECT ... WHERE name = 'DROP TABLE'``
    is rejected.

    Never raises; unexpected failures come back as ``valid=False``.
    """
    try:
        clean_upper = strip_comments(sql).upper()
        if not clean_upper:
            return ClassificationResult(
                valid=False,
                statement_type=StatementType.UNKNOWN,
                error=messages.INVALID_SQL,
            )

        stmt_type = _leading_type(sql.strip().upper())

        for pattern in _DENY_PATTERNS:
            if pattern.search(clean_upper):
                return ClassificationResult(
                    valid=False,
                    statement_type=stmt_type,
                    error=messages.FORBIDDEN_DDL,
                )

        return ClassificationResult(
            valid=True,
            statement_type=stmt_type,
            is_allowed_dml=stmt_type in ALLOWED_DML,
        )
    except Exception as e:
        return ClassificationResult(
            valid=False,
            statement_type=StatementType.UNKNOWN,
            error=str(e) or "Failed to parse SQL",
        )


def validate_sql_syntax(sql: str) -> ClassificationResult:
    return classify_sql(sql)


def is_select_only(sql: str) -> bool:
    result = classify_sql(sql)
    return result.valid and result.statement_type == StatementType.SELECT


def is_dml_only(sql: str) -> bool:
    result = classify_sql(sql)
    return (
        result.valid
        and result.is_allowed_dml
        and result.statement_type != StatementType.SELECT
    )
