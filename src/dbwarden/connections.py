"""Raw SQL connections: the single escape hatch the gateway executes through.

A tool invocation opens exactly one connection, so a ``SET statement_timeout``
and the statement that follows share a session. Connections are autocommit;
nothing is retried.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import aiosqlite
import psycopg

from dbwarden.adapters._base import DatabaseError, DatabaseType, Row

# Query parameters understood by the ORM but rejected by libpq.
_NON_LIBPQ_PARAMS = frozenset({"schema", "connection_limit", "pool_timeout", "pgbouncer"})


@runtime_checkable
class Connection(Protocol):
    async def query(self, sql: str, params: Sequence[Any] | None = None) -> list[Row]: ...
    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> int: ...


def postgres_conninfo(url: str) -> str:
    """Drop ORM-only query parameters from a postgres URL."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [(k, v) for k, v in parse_qsl(parts.query) if k not in _NON_LIBPQ_PARAMS]
    return urlunsplit(parts._replace(query=urlencode(kept)))


def sqlite_path(url: str) -> str:
    """Turn ``file:./dev.db?connection_limit=1`` into ``./dev.db``."""
    path = url.removeprefix("file:")
    path = path.split("?", 1)[0]
    if path.startswith("//"):
        path = path[2:]
    return path


class PostgresConnection:
    """Raw SQL over one psycopg (async) connection."""

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> list[Row]:
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, list(params) if params else None)
                if cur.description is None:
                    return []
                columns = [desc.name for desc in cur.description]
                rows_raw = await cur.fetchall()
        except psycopg.Error as e:
            raise DatabaseError(str(e).strip()) from e
        return [dict(zip(columns, row, strict=True)) for row in rows_raw]

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, list(params) if params else None)
                return max(cur.rowcount, 0)
        except psycopg.Error as e:
            raise DatabaseError(str(e).strip()) from e


class SqliteConnection:
    """Raw SQL over one aiosqlite connection in autocommit mode."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> list[Row]:
        try:
            async with self._conn.execute(sql, tuple(params) if params else ()) as cur:
                if cur.description is None:
                    return []
                columns = [desc[0] for desc in cur.description]
                rows_raw = await cur.fetchall()
        except aiosqlite.Error as e:
            raise DatabaseError(str(e)) from e
        return [dict(zip(columns, row, strict=True)) for row in rows_raw]

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        try:
            async with self._conn.execute(sql, tuple(params) if params else ()) as cur:
                return max(cur.rowcount, 0)
        except aiosqlite.Error as e:
            raise DatabaseError(str(e)) from e


@asynccontextmanager
async def open_connection(url: str, db_type: DatabaseType) -> AsyncIterator[Connection]:
    """Open one connection for the duration of a tool invocation."""
    if db_type == DatabaseType.POSTGRESQL:
        try:
            pg_conn = await psycopg.AsyncConnection.connect(
                postgres_conninfo(url), autocommit=True, application_name="dbwarden",
            )
        except psycopg.Error as e:
            raise DatabaseError(f"PostgreSQL connection failed: {e}") from e
        try:
            yield PostgresConnection(pg_conn)
        finally:
            await pg_conn.close()
        return

    path = sqlite_path(url)
    if not path or not Path(path).exists():
        raise DatabaseError(f"SQLite database not found: {path or url!r}")
    try:
        lite_conn = await aiosqlite.connect(path, isolation_level=None)
    except aiosqlite.Error as e:
        raise DatabaseError(f"SQLite connection failed: {e}") from e
    try:
        yield SqliteConnection(lite_conn)
    finally:
        await lite_conn.close()
