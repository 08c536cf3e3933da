"""Query adapter protocol: the boundary between the gateway and SQL dialects.

Adapters only build SQL text and normalize result rows. They never talk to
the database themselves; the tool dispatcher runs their queries through a
connection and hands the raw rows back for normalization.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]


class DatabaseType(enum.Enum):
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class DatabaseError(Exception):
    """Raised for connection/execution failures."""


@dataclass
class TableInfo:
    name: str


@dataclass
class ColumnInfo:
    name: str
    type: str
    is_nullable: bool = True
    default_value: str | None = None
    is_primary_key: bool | None = None


@dataclass
class ForeignKeyInfo:
    column: str
    referenced_table: str
    referenced_column: str


@dataclass
class IndexInfo:
    name: str
    columns: list[str] = field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False


@dataclass
class ConstraintInfo:
    name: str
    type: str


@dataclass
class ExplainResult:
    """Query plan. ``plan`` is a JSON tree for Postgres, a step list for SQLite."""

    plan: Any
    format: str  # "json" or "text"


def quote_literal(value: str) -> str:
    """Render a value as a single-quoted SQL string literal."""
    return "'" + value.replace("'", "''") + "'"


def quote_identifier(name: str) -> str:
    """Render a name as a double-quoted SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


@runtime_checkable
class DatabaseQueryAdapter(Protocol):
    type: DatabaseType

    def dialect(self) -> str: ...

    # Schema introspection
    def get_tables_query(self) -> str: ...
    def get_columns_query(self, table_name: str) -> str: ...
    def get_foreign_keys_query(self, table_name: str) -> str: ...
    def get_indexes_query(self, table_name: str) -> str: ...
    def get_index_columns_query(self, index_name: str) -> str | None: ...
    def get_constraints_query(self, table_name: str) -> str: ...

    # Query execution features
    def supports_statement_timeout(self) -> bool: ...
    def get_statement_timeout_query(self, timeout_ms: int) -> str | None: ...
    def supports_returning_clause(self) -> bool: ...

    # Explain
    def get_explain_query(self, sql: str) -> str: ...
    def parse_explain_result(self, rows: Sequence[Row]) -> ExplainResult: ...

    # Result transformers (dialect rows → common shapes)
    def transform_tables_result(self, rows: Sequence[Row]) -> list[TableInfo]: ...
    def transform_columns_result(self, rows: Sequence[Row]) -> list[ColumnInfo]: ...
    def transform_foreign_keys_result(self, rows: Sequence[Row]) -> list[ForeignKeyInfo]: ...
    def transform_indexes_result(self, rows: Sequence[Row]) -> list[IndexInfo]: ...
    def transform_index_columns(self, rows: Sequence[Row]) -> list[str]: ...
    def transform_constraints_result(self, rows: Sequence[Row]) -> list[ConstraintInfo]: ...


def merge_index_columns(index: IndexInfo, columns: Sequence[str]) -> IndexInfo:
    """Attach columns reported by a per-index follow-up query."""
    index.columns.extend(columns)
    return index
