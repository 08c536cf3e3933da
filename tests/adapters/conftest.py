"""Adapter test fixtures."""

from __future__ import annotations

import pytest

PG_SCHEMA = """
DROP TABLE IF EXISTS dbwarden_posts;
DROP TABLE IF EXISTS dbwarden_users;
CREATE TABLE dbwarden_users (
    id SERIAL PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    name TEXT
);
CREATE TABLE dbwarden_posts (
    id SERIAL PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES dbwarden_users(id),
    title TEXT NOT NULL
);
CREATE INDEX dbwarden_posts_user_title ON dbwarden_posts (user_id, title);
INSERT INTO dbwarden_users (email, name) VALUES ('ada@example.com', 'Ada'), ('grace@example.com', 'Grace');
INSERT INTO dbwarden_posts (user_id, title) VALUES (1, 'Notes'), (2, 'Compilers');
"""


@pytest.fixture
def pg_tables(pg_dsn):
    """Create the two test tables in the public schema, drop them afterwards."""
    psycopg = pytest.importorskip("psycopg")

    with psycopg.connect(pg_dsn, autocommit=True) as conn:
        conn.execute(PG_SCHEMA)
    yield pg_dsn
    with psycopg.connect(pg_dsn, autocommit=True) as conn:
        conn.execute("DROP TABLE IF EXISTS dbwarden_posts; DROP TABLE IF EXISTS dbwarden_users;")
