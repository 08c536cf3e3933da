"""Query adapters: implementations of the DatabaseQueryAdapter protocol."""

from dbwarden.adapters._base import (
    ColumnInfo,
    ConstraintInfo,
    DatabaseError,
    DatabaseQueryAdapter,
    DatabaseType,
    ExplainResult,
    ForeignKeyInfo,
    IndexInfo,
    Row,
    TableInfo,
    merge_index_columns,
    quote_identifier,
    quote_literal,
)
from dbwarden.adapters._registry import (
    DatabaseTypeCache,
    database_type_cache,
    detect_database_type,
    get_database_type,
    get_query_adapter,
    reset_database_type_cache,
)
from dbwarden.adapters.postgres import PostgresQueryAdapter
from dbwarden.adapters.sqlite import SqliteQueryAdapter

__all__ = [
    "ColumnInfo",
    "ConstraintInfo",
    "DatabaseError",
    "DatabaseQueryAdapter",
    "DatabaseType",
    "DatabaseTypeCache",
    "ExplainResult",
    "ForeignKeyInfo",
    "IndexInfo",
    "PostgresQueryAdapter",
    "Row",
    "SqliteQueryAdapter",
    "TableInfo",
    "database_type_cache",
    "detect_database_type",
    "get_database_type",
    "get_query_adapter",
    "merge_index_columns",
    "quote_identifier",
    "quote_literal",
    "reset_database_type_cache",
]
