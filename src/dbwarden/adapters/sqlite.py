"""SQLite query adapter: PRAGMA-based introspection.

SQLite reports primary keys inline (``pk`` in ``table_info``) but
``index_list`` carries no columns: each index needs its own
``PRAGMA index_info`` query, merged back in with ``merge_index_columns``.
"""

from __future__ import annotations

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


class SqliteQueryAdapter:
    type = DatabaseType.SQLITE

    def dialect(self) -> str:
        return "sqlite"

    def get_tables_query(self) -> str:
        return (
            "SELECT name "
            "FROM sqlite_master "
            "WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite_%' "
            "AND name NOT LIKE '_prisma_%' "
            "ORDER BY name"
        )

    def get_columns_query(self, table_name: str) -> str:
        return f"PRAGMA table_info({quote_literal(table_name)})"

    def get_foreign_keys_query(self, table_name: str) -> str:
        return f"PRAGMA foreign_key_list({quote_literal(table_name)})"

    def get_indexes_query(self, table_name: str) -> str:
        return f"PRAGMA index_list({quote_literal(table_name)})"

    def get_index_columns_query(self, index_name: str) -> str:
        return f"PRAGMA index_info({quote_literal(index_name)})"

    def get_constraints_query(self, table_name: str) -> str:
        # Constraints live inside the CREATE TABLE text; nothing to list.
        return "SELECT '' AS name, '' AS type WHERE 0"

    def supports_statement_timeout(self) -> bool:
        return False

    def get_statement_timeout_query(self, timeout_ms: int) -> str | None:
        return None

    def supports_returning_clause(self) -> bool:
        # RETURNING needs SQLite 3.35+.
        return True

    def get_explain_query(self, sql: str) -> str:
        return f"EXPLAIN QUERY PLAN {sql}"

    def parse_explain_result(self, rows: Sequence[Row]) -> ExplainResult:
        # Rows are (id, parent, notused, detail); pre-3.24 builds report
        # (selectid, order, from, detail) instead.
        steps = []
        for row in rows:
            detail = row.get("detail")
            if detail is None:
                detail = str(row["from"]) if row.get("from") is not None else ""
            steps.append({
                "id": row.get("id", row.get("selectid")),
                "parent": row.get("parent", row.get("order")),
                "detail": detail,
            })
        return ExplainResult(plan=steps, format="text")

    def transform_tables_result(self, rows: Sequence[Row]) -> list[TableInfo]:
        return [TableInfo(name=row["name"]) for row in rows]

    def transform_columns_result(self, rows: Sequence[Row]) -> list[ColumnInfo]:
        return [
            ColumnInfo(
                name=row["name"],
                type=row["type"],
                is_nullable=(row["notnull"] == 0),
                default_value=row.get("dflt_value"),
                is_primary_key=(row["pk"] > 0),
            )
            for row in rows
        ]

    def transform_foreign_keys_result(self, rows: Sequence[Row]) -> list[ForeignKeyInfo]:
        return [
            ForeignKeyInfo(
                column=row["from"],
                referenced_table=row["table"],
                referenced_column=row["to"],
            )
            for row in rows
        ]

    def transform_indexes_result(self, rows: Sequence[Row]) -> list[IndexInfo]:
        # Columns are filled in later from PRAGMA index_info.
        return [
            IndexInfo(
                name=row["name"],
                columns=[],
                is_unique=(row["unique"] == 1),
                is_primary=(row.get("origin") == "pk"),
            )
            for row in rows
        ]

    def transform_index_columns(self, rows: Sequence[Row]) -> list[str]:
        ordered = sorted(rows, key=lambda r: r.get("seqno", 0))
        # Expression index members have no name.
        return [row["name"] for row in ordered if row["name"] is not None]

    def transform_constraints_result(self, rows: Sequence[Row]) -> list[ConstraintInfo]:
        return []
