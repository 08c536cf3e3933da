"""Dialect detection and adapter selection."""

from __future__ import annotations

import os
import threading

from dbwarden.adapters._base import DatabaseQueryAdapter, DatabaseType
from dbwarden.adapters.postgres import PostgresQueryAdapter
from dbwarden.adapters.sqlite import SqliteQueryAdapter

_ADAPTER_MAP: dict[DatabaseType, type[DatabaseQueryAdapter]] = {
    DatabaseType.POSTGRESQL: PostgresQueryAdapter,
    DatabaseType.SQLITE: SqliteQueryAdapter,
}


def detect_database_type(url: str | None = None) -> DatabaseType:
    """Infer the dialect from a connection URL.

    ``file:`` URLs and ``.db`` / ``.sqlite`` paths are SQLite,
    ``postgres://`` / ``postgresql://`` URLs are PostgreSQL, and anything
    else falls back to SQLite.
    """
    db_url = url if url is not None else os.environ.get("DATABASE_URL", "")

    if db_url.startswith("file:") or db_url.endswith((".db", ".sqlite")):
        return DatabaseType.SQLITE
    if db_url.startswith(("postgresql://", "postgres://")):
        return DatabaseType.POSTGRESQL
    return DatabaseType.SQLITE


class DatabaseTypeCache:
    """Process-wide, lazily detected database type.

    Written at most once per process unless ``reset()`` is called. Detection
    is idempotent, so concurrent readers racing on the first ``get()`` all
    see the same value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: DatabaseType | None = None

    def get(self, url: str | None = None) -> DatabaseType:
        if self._value is None:
            with self._lock:
                if self._value is None:
                    self._value = detect_database_type(url)
        return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = None

    @property
    def is_set(self) -> bool:
        return self._value is not None


database_type_cache = DatabaseTypeCache()


def get_database_type(url: str | None = None) -> DatabaseType:
    return database_type_cache.get(url)


def reset_database_type_cache() -> None:
    database_type_cache.reset()


def get_query_adapter(db_type: DatabaseType | None = None) -> DatabaseQueryAdapter:
    """Return the adapter for ``db_type``, or for the cached process type."""
    resolved = db_type if db_type is not None else get_database_type()
    return _ADAPTER_MAP[resolved]()
