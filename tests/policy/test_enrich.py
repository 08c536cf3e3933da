"""Test auto-LIMIT injection, row-limit resolution and RETURNING detection."""

import pytest

from dbwarden.policy import add_limit_to_select, has_returning_clause, resolve_row_limit
from dbwarden.policy.enrich import DEFAULT_LIMIT, MAX_ROWS


def test_limit_appended() -> None:
    assert add_limit_to_select("SELECT * FROM t", 50) == "SELECT * FROM t LIMIT 50"


def test_existing_limit_wins() -> None:
    sql = "SELECT * FROM t LIMIT 10"
    assert add_limit_to_select(sql, 50) == sql


def test_existing_limit_not_lowered() -> None:
    sql = "SELECT * FROM t LIMIT 100000"
    assert add_limit_to_select(sql, 5) == sql


def test_lowercase_limit_detected() -> None:
    sql = "select * from t limit 3"
    assert add_limit_to_select(sql, 50) == sql


def test_trailing_semicolon_stripped() -> None:
    assert add_limit_to_select("SELECT 1;  ", 7) == "SELECT 1 LIMIT 7"


def test_limit_substring_counts_as_limit() -> None:
    # Substring match: a column named rate_limit suppresses the auto-LIMIT.
    sql = "SELECT rate_limit FROM plans"
    assert add_limit_to_select(sql, 5) == sql


@pytest.mark.parametrize(
    "requested,expected",
    [
        (None, DEFAULT_LIMIT),
        (0, DEFAULT_LIMIT),
        (1, 1),
        (500, 500),
        (MAX_ROWS, MAX_ROWS),
        (MAX_ROWS + 1, MAX_ROWS),
        (10**9, MAX_ROWS),
        (-5, 1),
    ],
)
def test_resolve_row_limit(requested, expected) -> None:
    assert resolve_row_limit(requested) == expected


def test_resolve_row_limit_custom_bounds() -> None:
    assert resolve_row_limit(None, default=20, maximum=10) == 10
    assert resolve_row_limit(15, default=5, maximum=100) == 15


@pytest.mark.parametrize(
    "sql,expected",
    [
        ("DELETE FROM users RETURNING id", True),
        ("insert into t (a) values (1) returning *", True),
        ("DELETE FROM users", False),
        # Known false positive: the word inside a literal.
        ("UPDATE t SET note = 'returning soon'", True),
    ],
)
def test_has_returning_clause(sql: str, expected: bool) -> None:
    assert has_returning_clause(sql) is expected
