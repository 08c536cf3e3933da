"""The seven database tools exposed to agents.

Every tool runs the same pipeline::

    access gate -> statement policy (SQL tools) -> database work -> audit -> text

Nothing raises out of a tool. Access denials and policy rejections come back
as fixed messages; database failures come back as
``Error executing <tool>: <message>``. Successful results are pretty-printed
JSON. Explain output is dialect-dependent: a JSON plan tree for PostgreSQL,
a flat list of ``{id, parent, detail}`` steps for SQLite.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any

from dbwarden import audit, messages
from dbwarden.access import check_access
from dbwarden.adapters import (
    ColumnInfo,
    DatabaseError,
    DatabaseQueryAdapter,
    get_database_type,
    get_query_adapter,
    merge_index_columns,
    quote_identifier,
)
from dbwarden.audit import LogEntry
from dbwarden.config import GatewayConfig
from dbwarden.connections import Connection, open_connection
from dbwarden.policy import (
    StatementType,
    add_limit_to_select,
    check_read_statement,
    check_write_statement,
    classify_sql,
    has_returning_clause,
    resolve_row_limit,
    validate_sql_syntax,
)

ConnectionFactory = Callable[[], AbstractAsyncContextManager[Connection]]

SAMPLE_ROWS = 5


def _dumps(value: object) -> str:
    return json.dumps(value, indent=2, default=str)


def _column_dict(col: ColumnInfo, *, with_primary_key: bool = False) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": col.name,
        "type": col.type,
        "isNullable": col.is_nullable,
        "default": col.default_value,
    }
    if with_primary_key:
        out["isPrimaryKey"] = bool(col.is_primary_key)
    return out


class DatabaseTools:
    """Dispatcher for the gateway tools.

    ``adapter`` defaults to the one matching ``config.database_url``;
    ``connection_factory`` defaults to opening a fresh connection to that URL.
    Each tool call acquires exactly one connection.
    """

    def __init__(
        self,
        config: GatewayConfig,
        adapter: DatabaseQueryAdapter | None = None,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        self.config = config
        self.adapter = adapter or get_query_adapter(get_database_type(config.database_url))
        self._connection_factory = connection_factory

    @property
    def database(self) -> str:
        return self.adapter.type.value

    def _connect(self) -> AbstractAsyncContextManager[Connection]:
        if self._connection_factory is not None:
            return self._connection_factory()
        return open_connection(self.config.database_url, self.adapter.type)

    def _deny(self, headers: Mapping[str, str] | None) -> str | None:
        decision = check_access(self.config, headers or {})
        return None if decision.allowed else decision.error_message

    def _reject(self, tool: str, reason: str) -> str:
        audit.log_operation(LogEntry(timestamp=audit.get_timestamp(), tool=tool, error=reason))
        return reason

    def _failed(
        self,
        tool: str,
        start: float,
        error: Exception,
        *,
        statement_class: str | None = None,
        reason: str | None = None,
    ) -> str:
        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool=tool,
            statement_class=statement_class,
            duration_ms=audit.measure_duration(start),
            error=str(error),
            reason=reason,
        ))
        return f"Error executing {tool}: {error}"

    async def _apply_statement_timeout(self, conn: Connection) -> None:
        if not self.adapter.supports_statement_timeout():
            return
        stmt = self.adapter.get_statement_timeout_query(self.config.statement_timeout_ms)
        if stmt:
            await conn.execute(stmt)

    async def _table_names(self, conn: Connection) -> list[str]:
        rows = await conn.query(self.adapter.get_tables_query())
        return [t.name for t in self.adapter.transform_tables_result(rows)]

    async def _row_count(self, conn: Connection, table: str) -> int:
        # Only ever called with names from the adapter's own table list.
        rows = await conn.query(f"SELECT COUNT(*) AS count FROM {quote_identifier(table)}")
        return int(rows[0]["count"] or 0) if rows else 0

    # -- tools ---------------------------------------------------------------

    async def health(self, *, headers: Mapping[str, str] | None = None) -> str:
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool="health",
            duration_ms=audit.measure_duration(start),
        ))
        return f"{messages.HEALTHY} (database: {self.database})"

    async def get_schema_overview(self, *, headers: Mapping[str, str] | None = None) -> str:
        tool = "get_schema_overview"
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        adapter = self.adapter
        try:
            tables: list[dict[str, Any]] = []
            async with self._connect() as conn:
                for name in await self._table_names(conn):
                    columns = adapter.transform_columns_result(
                        await conn.query(adapter.get_columns_query(name))
                    )
                    foreign_keys = adapter.transform_foreign_keys_result(
                        await conn.query(adapter.get_foreign_keys_query(name))
                    )
                    tables.append({
                        "table": name,
                        "rowCount": await self._row_count(conn, name),
                        "columns": [_column_dict(c) for c in columns],
                        "primaryKey": [c.name for c in columns if c.is_primary_key],
                        "foreignKeys": [
                            {
                                "column": fk.column,
                                "references": {
                                    "table": fk.referenced_table,
                                    "column": fk.referenced_column,
                                },
                            }
                            for fk in foreign_keys
                        ],
                    })
        except DatabaseError as e:
            return self._failed(tool, start, e)

        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool=tool,
            duration_ms=audit.measure_duration(start),
            row_count=len(tables),
        ))
        return _dumps({"database": self.database, "tables": tables})

    async def get_table_details(
        self, table: str, *, headers: Mapping[str, str] | None = None,
    ) -> str:
        tool = "get_table_details"
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        adapter = self.adapter
        try:
            async with self._connect() as conn:
                if table not in await self._table_names(conn):
                    raise DatabaseError(f"Table '{table}' not found")

                columns = adapter.transform_columns_result(
                    await conn.query(adapter.get_columns_query(table))
                )
                indexes = adapter.transform_indexes_result(
                    await conn.query(adapter.get_indexes_query(table))
                )
                for index in indexes:
                    follow_up = adapter.get_index_columns_query(index.name)
                    if follow_up:
                        merge_index_columns(
                            index, adapter.transform_index_columns(await conn.query(follow_up)),
                        )
                constraints = adapter.transform_constraints_result(
                    await conn.query(adapter.get_constraints_query(table))
                )
                row_count = await self._row_count(conn, table)
                sample_rows = await conn.query(
                    f"SELECT * FROM {quote_identifier(table)} LIMIT {SAMPLE_ROWS}"
                )
        except DatabaseError as e:
            return self._failed(tool, start, e)

        details = {
            "database": self.database,
            "table": table,
            "rowCount": row_count,
            "columns": [_column_dict(c, with_primary_key=True) for c in columns],
            "indexes": [
                {
                    "name": idx.name,
                    "columns": idx.columns,
                    "isUnique": idx.is_unique,
                    "isPrimary": idx.is_primary,
                }
                for idx in indexes
            ],
            "constraints": [{"name": c.name, "type": c.type} for c in constraints],
            "sampleRows": sample_rows[:SAMPLE_ROWS],
        }
        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool=tool,
            duration_ms=audit.measure_duration(start),
        ))
        return _dumps(details)

    async def execute_sql_select(
        self,
        sql: str,
        params: Sequence[Any] | None = None,
        row_limit: int | None = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        tool = "execute_sql_select"
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        rejected = check_read_statement(sql, dialect=self.adapter.dialect())
        if rejected:
            return self._reject(tool, rejected)

        statement_class = StatementType.SELECT.value
        limit = resolve_row_limit(
            row_limit, default=self.config.default_limit, maximum=self.config.max_rows,
        )
        limited_sql = add_limit_to_select(sql, limit)
        audit.log_sql(limited_sql, params)

        try:
            async with self._connect() as conn:
                await self._apply_statement_timeout(conn)
                rows = await conn.query(limited_sql, params)
        except DatabaseError as e:
            return self._failed(tool, start, e, statement_class=statement_class)

        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool=tool,
            statement_class=statement_class,
            duration_ms=audit.measure_duration(start),
            row_count=len(rows),
        ))
        return _dumps(rows)

    async def execute_sql_mutation(
        self,
        sql: str,
        params: Sequence[Any] | None = None,
        *,
        require_reason: str,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        """Run one INSERT, UPDATE or DELETE.

        ``require_reason`` is recorded in the audit log and never checked.
        RETURNING rows are collected only when the statement mentions
        RETURNING and the dialect supports it; the check is a substring
        match, so a string literal containing the word also takes the
        query path.
        """
        tool = "execute_sql_mutation"
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        rejected = check_write_statement(sql, dialect=self.adapter.dialect())
        if rejected:
            return self._reject(tool, rejected)

        statement_class = classify_sql(sql).statement_type.value
        audit.log_sql(sql, params)
        audit.log_mutation_reason(require_reason)

        use_returning = has_returning_clause(sql) and self.adapter.supports_returning_clause()
        response: dict[str, Any]
        try:
            async with self._connect() as conn:
                await self._apply_statement_timeout(conn)
                if use_returning:
                    returning = await conn.query(sql, params)
                    response = {"rowCount": len(returning), "returning": returning}
                else:
                    response = {"rowCount": await conn.execute(sql, params)}
        except DatabaseError as e:
            return self._failed(
                tool, start, e, statement_class=statement_class, reason=require_reason,
            )

        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool=tool,
            statement_class=statement_class,
            duration_ms=audit.measure_duration(start),
            row_count=response["rowCount"],
            reason=require_reason,
        ))
        return _dumps(response)

    async def explain_query(
        self, sql: str, *, headers: Mapping[str, str] | None = None,
    ) -> str:
        tool = "explain_query"
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        rejected = check_read_statement(
            sql, dialect=self.adapter.dialect(), rejection=messages.NOT_EXPLAINABLE,
        )
        if rejected:
            return self._reject(tool, rejected)

        statement_class = "EXPLAIN"
        explain_sql = self.adapter.get_explain_query(sql)
        audit.log_sql(explain_sql)

        try:
            async with self._connect() as conn:
                await self._apply_statement_timeout(conn)
                result = self.adapter.parse_explain_result(await conn.query(explain_sql))
        except DatabaseError as e:
            return self._failed(tool, start, e, statement_class=statement_class)

        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool=tool,
            statement_class=statement_class,
            duration_ms=audit.measure_duration(start),
        ))
        return _dumps({"database": self.database, "format": result.format, "plan": result.plan})

    async def validate_sql(self, sql: str, *, headers: Mapping[str, str] | None = None) -> str:
        start = time.perf_counter()
        denied = self._deny(headers)
        if denied:
            return denied

        result = validate_sql_syntax(sql)
        audit.log_operation(LogEntry(
            timestamp=audit.get_timestamp(),
            tool="validate_sql",
            statement_class=result.statement_type.value,
            duration_ms=audit.measure_duration(start),
            error=result.error,
        ))
        return _dumps({"database": self.database, **result.to_dict()})
