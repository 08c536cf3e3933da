"""PostgreSQL query adapter: information_schema and pg_catalog introspection."""

from __future__ import annotations

import json
from collections.abc import Sequence

from dbwarden.adapters._base import (
    ColumnInfo,
    ConstraintInfo,
    DatabaseType,
    ExplainResult,
    ForeignKeyInfo,
    IndexInfo,
    Row,
    TableInfo,
    quote_literal,
)

_SCHEMA = "public"


class PostgresQueryAdapter:
    """Introspection restricted to the ``public`` schema."""

    type = DatabaseType.POSTGRESQL

    def dialect(self) -> str:
        return "postgres"

    def get_tables_query(self) -> str:
        return (
            "SELECT table_name AS name "
            "FROM information_schema.tables "
            f"WHERE table_schema = '{_SCHEMA}' "
            "AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )

    def get_columns_query(self, table_name: str) -> str:
        table = quote_literal(table_name)
        return (
            "SELECT "
            "c.column_name AS name, "
            "c.data_type AS type, "
            "c.is_nullable AS is_nullable, "
            "c.column_default AS default_value, "
            "CASE WHEN pk.column_name IS NOT NULL THEN true ELSE false END AS is_primary_key "
            "FROM information_schema.columns c "
            "LEFT JOIN ("
            "SELECT kcu.column_name "
            "FROM information_schema.table_constraints tc "
            "JOIN information_schema.key_column_usage kcu "
            "ON tc.constraint_name = kcu.constraint_name "
            "AND tc.table_schema = kcu.table_schema "
            "WHERE tc.constraint_type = 'PRIMARY KEY' "
            f"AND tc.table_schema = '{_SCHEMA}' "
            f"AND tc.table_name = {table}"
            ") pk ON c.column_name = pk.column_name "
            f"WHERE c.table_schema = '{_SCHEMA}' "
            f"AND c.table_name = {table} "
            "ORDER BY c.ordinal_position"
        )

    def get_foreign_keys_query(self, table_name: str) -> str:
        return (
            "SELECT "
            'kcu.column_name AS "column", '
            "ccu.table_name AS referenced_table, "
            "ccu.column_name AS referenced_column "
            "FROM information_schema.table_constraints tc "
            "JOIN information_schema.key_column_usage kcu "
            "ON tc.constraint_name = kcu.constraint_name "
            "AND tc.table_schema = kcu.table_schema "
            "JOIN information_schema.constraint_column_usage ccu "
            "ON ccu.constraint_name = tc.constraint_name "
            "AND ccu.table_schema = tc.table_schema "
            "WHERE tc.constraint_type = 'FOREIGN KEY' "
            f"AND tc.table_schema = '{_SCHEMA}' "
            f"AND tc.table_name = {quote_literal(table_name)} "
            "ORDER BY kcu.ordinal_position"
        )

    def get_indexes_query(self, table_name: str) -> str:
        # One row per (index, column); grouped in transform_indexes_result.
        return (
            "SELECT "
            "i.relname AS index_name, "
            "a.attname AS column_name, "
            "ix.indisunique AS is_unique, "
            "ix.indisprimary AS is_primary "
            "FROM pg_class t "
            "JOIN pg_index ix ON t.oid = ix.indrelid "
            "JOIN pg_class i ON ix.indexrelid = i.oid "
            "JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey) "
            "JOIN pg_namespace n ON n.oid = t.relnamespace "
            f"WHERE n.nspname = '{_SCHEMA}' "
            f"AND t.relname = {quote_literal(table_name)} "
            "AND t.relkind = 'r' "
            "ORDER BY i.relname, a.attnum"
        )

    def get_index_columns_query(self, index_name: str) -> str | None:
        # get_indexes_query already returns the columns.
        return None

    def get_constraints_query(self, table_name: str) -> str:
        return (
            "SELECT constraint_name AS name, constraint_type AS type "
            "FROM information_schema.table_constraints "
            f"WHERE table_schema = '{_SCHEMA}' "
            f"AND table_name = {quote_literal(table_name)} "
            "ORDER BY constraint_name"
        )

    def supports_statement_timeout(self) -> bool:
        return True

    def get_statement_timeout_query(self, timeout_ms: int) -> str | None:
        return f"SET statement_timeout = {int(timeout_ms)}"

    def supports_returning_clause(self) -> bool:
        return True

    def get_explain_query(self, sql: str) -> str:
        return f"EXPLAIN (FORMAT JSON, ANALYZE FALSE, COSTS TRUE) {sql}"

    def parse_explain_result(self, rows: Sequence[Row]) -> ExplainResult:
        row = rows[0] if rows else None
        plan = row.get("QUERY PLAN") if row else None
        if isinstance(plan, str):
            plan = json.loads(plan)
        return ExplainResult(plan=plan if plan is not None else row, format="json")

    def transform_tables_result(self, rows: Sequence[Row]) -> list[TableInfo]:
        return [TableInfo(name=row["name"]) for row in rows]

    def transform_columns_result(self, rows: Sequence[Row]) -> list[ColumnInfo]:
        return [
            ColumnInfo(
                name=row["name"],
                type=row["type"],
                is_nullable=(row["is_nullable"] == "YES"),
                default_value=row.get("default_value"),
                is_primary_key=bool(row.get("is_primary_key")),
            )
            for row in rows
        ]

    def transform_foreign_keys_result(self, rows: Sequence[Row]) -> list[ForeignKeyInfo]:
        return [
            ForeignKeyInfo(
                column=row["column"],
                referenced_table=row["referenced_table"],
                referenced_column=row["referenced_column"],
            )
            for row in rows
        ]

    def transform_indexes_result(self, rows: Sequence[Row]) -> list[IndexInfo]:
        indexes: dict[str, IndexInfo] = {}
        for row in rows:
            existing = indexes.get(row["index_name"])
            if existing is not None:
                existing.columns.append(row["column_name"])
            else:
                indexes[row["index_name"]] = IndexInfo(
                    name=row["index_name"],
                    columns=[row["column_name"]],
                    is_unique=bool(row["is_unique"]),
                    is_primary=bool(row["is_primary"]),
                )
        return list(indexes.values())

    def transform_index_columns(self, rows: Sequence[Row]) -> list[str]:
        return [row["column_name"] for row in rows]

    def transform_constraints_result(self, rows: Sequence[Row]) -> list[ConstraintInfo]:
        return [ConstraintInfo(name=row["name"], type=row["type"]) for row in rows]
