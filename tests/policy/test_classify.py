"""Test SQL statement classification."""

import pytest

from dbwarden import messages
from dbwarden.policy import (
    StatementType,
    classify_sql,
    is_dml_only,
    is_select_only,
    strip_comments,
    validate_sql_syntax,
)


@pytest.mark.parametrize(
    "sql,expected",
    [
        ("SELECT id FROM users", StatementType.SELECT),
        ("select * from orders where status = 'active'", StatementType.SELECT),
        ("  \n SELECT 1", StatementType.SELECT),
        ("WITH cte AS (SELECT 1) SELECT * FROM cte", StatementType.SELECT),
        ("EXPLAIN SELECT * FROM users", StatementType.SELECT),
        ("INSERT INTO users (name) VALUES ('test')", StatementType.INSERT),
        ("UPDATE users SET name = 'x' WHERE id = 1", StatementType.UPDATE),
        ("DELETE FROM orders WHERE id = 1", StatementType.DELETE),
        ("VACUUM users", StatementType.UNKNOWN),
        ("SHOW search_path", StatementType.UNKNOWN),
        ("WITH cte AS (DELETE FROM t) DELETE FROM u", StatementType.UNKNOWN),
    ],
)
def test_leading_keyword(sql: str, expected: StatementType) -> None:
    assert classify_sql(sql).statement_type == expected


def test_leading_line_comment_is_unknown() -> None:
    result = classify_sql("-- fetch users\nSELECT * FROM users")
    assert result.statement_type == StatementType.UNKNOWN
    assert is_select_only("-- fetch users\nSELECT * FROM users") is False


def test_leading_block_comment_is_unknown() -> None:
    sql = "/* audit */ DELETE FROM users WHERE id = 1"
    assert classify_sql(sql).statement_type == StatementType.UNKNOWN
    assert is_dml_only(sql) is False


def test_nested_comment_cannot_hide_delete() -> None:
    sql = "/* /* */ SELECT 1 LIMIT 1 */ DELETE FROM users"
    assert classify_sql(sql).statement_type == StatementType.UNKNOWN
    assert is_select_only(sql) is False


def test_trailing_comment_keeps_type() -> None:
    assert classify_sql("SELECT 1 -- one").statement_type == StatementType.SELECT


@pytest.mark.parametrize(
    "sql",
    [
        "DROP TABLE users",
        "drop table users",
        "CREATE TABLE t (id INT)",
        "ALTER TABLE t ADD COLUMN x INT",
        "TRUNCATE TABLE users",
        "CREATE INDEX idx ON t (x)",
        "DROP SCHEMA public CASCADE",
        "CREATE EXTENSION pgcrypto",
        "EXECUTE my_plan",
        "SET ROLE admin",
        "RESET ROLE",
        "COPY users TO PROGRAM 'cat > /tmp/x'",
        "REVOKE ALL ON users FROM public",
    ],
)
def test_forbidden_constructs(sql: str) -> None:
    result = classify_sql(sql)
    assert result.valid is False
    assert result.error == messages.FORBIDDEN_DDL


def test_deny_list_applies_inside_literals() -> None:
    # Conservative: the keyword scan does not understand string literals.
    result = classify_sql("SELECT * FROM x WHERE name = 'DROP TABLE'")
    assert result.valid is False
    assert result.statement_type == StatementType.SELECT
    assert result.error == messages.FORBIDDEN_DDL


def test_deny_list_applies_in_subquery() -> None:
    result = classify_sql("SELECT * FROM (SELECT 1) t; DROP TABLE users")
    assert result.valid is False


def test_grant_keeps_its_statement_type() -> None:
    result = classify_sql("GRANT SELECT ON users TO public")
    assert result.to_dict() == {
        "valid": False,
        "statementType": "GRANT",
        "error": messages.FORBIDDEN_DDL,
    }


@pytest.mark.parametrize("sql", ["", "   ", "\n\t", "-- only a comment", "/* nothing */"])
def test_empty_input_is_invalid(sql: str) -> None:
    result = classify_sql(sql)
    assert result.valid is False
    assert result.statement_type == StatementType.UNKNOWN
    assert result.error == messages.INVALID_SQL


def test_valid_result_has_no_error_key() -> None:
    assert classify_sql("SELECT 1").to_dict() == {"valid": True, "statementType": "SELECT"}


def test_validate_sql_syntax_matches_classifier() -> None:
    sql = "UPDATE users SET name = 'x'"
    assert validate_sql_syntax(sql) == classify_sql(sql)


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT 1",
        "SELECT * FROM users WHERE id = 1",
        "SELECT a, b FROM t ORDER BY a",
        "SELECT count(*) FROM orders GROUP BY status",
    ],
)
def test_is_select_only_accepts_plain_selects(sql: str) -> None:
    assert is_select_only(sql) is True


@pytest.mark.parametrize(
    "sql",
    [
        "INSERT INTO t VALUES (1)",
        "DELETE FROM t",
        "SELECT 1; DROP TABLE t",
        "VACUUM",
        "",
    ],
)
def test_is_select_only_rejects(sql: str) -> None:
    assert is_select_only(sql) is False


@pytest.mark.parametrize(
    "sql",
    [
        "INSERT INTO t (a) VALUES (1)",
        "UPDATE t SET a = 1 WHERE id = 2",
        "DELETE FROM t WHERE id = 3",
        "delete from t",
    ],
)
def test_is_dml_only_accepts(sql: str) -> None:
    assert is_dml_only(sql) is True


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT 1",
        "WITH c AS (SELECT 1) SELECT * FROM c",
        "EXPLAIN SELECT 1",
        "MERGE INTO t USING s ON t.id = s.id WHEN MATCHED THEN DELETE",
        "VACUUM",
        "DROP TABLE t",
        "",
    ],
)
def test_is_dml_only_rejects_selects_and_unknown(sql: str) -> None:
    assert is_dml_only(sql) is False


def test_strip_comments() -> None:
    sql = "/* a */ SELECT 1 -- trailing\n"
    assert strip_comments(sql) == "SELECT 1"
