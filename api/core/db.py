"""
Async database access (raw SQL) using asyncpg.

`Database` owns the connection pool. The FastAPI lifespan builds exactly one
handle on startup, parks it on `app.state.db` and closes it on shutdown (see
`api/main.py`). Repositories receive the handle (or a transaction-scoped
`Connection`) as their first argument instead of reaching for a global.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    """
    DATABASE_URL wins; otherwise the DSN is assembled from DB_HOST, DB_PORT,
    DB_NAME, DB_USER and DB_PASSWORD.
    """
    url = os.environ.get("DATABASE_URL", "").strip()
    if url:
        return _sanitize_database_url(url)

    host = os.environ.get("DB_HOST", "").strip() or "localhost"
    port = _env_int("DB_PORT", 5432)
    name = os.environ.get("DB_NAME", "").strip() or "catalog"
    user = os.environ.get("DB_USER", "").strip() or "postgres"
    password = os.environ.get("DB_PASSWORD", "")

    credentials = quote(user, safe="")
    if password:
        credentials += ":" + quote(password, safe="")
    return f"postgresql://{credentials}@{host}:{port}/{quote(name, safe='')}"


def pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN_SIZE", 1), 0)


def pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX_SIZE", 5), 1)


def command_timeout() -> int:
    return max(_env_int("DB_COMMAND_TIMEOUT", 30), 1)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Connection:
    """
    A single pooled connection, handed out by `Database.transaction()`.
    Exposes the same query helpers as `Database`.
    """

    def __init__(self, conn: asyncpg.Connection) -> None:
        self._conn = conn

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        row = await self._conn.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        rows = await self._conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        return await self._conn.execute(sql, *args)


class Database:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @classmethod
    async def connect(cls, dsn: str | None = None) -> "Database":
        pool = await asyncpg.create_pool(
            dsn=dsn or database_url(),
            min_size=pool_min_size(),
            max_size=pool_max_size(),
            command_timeout=command_timeout(),
        )
        return cls(pool)

    async def close(self) -> None:
        await self._pool.close()

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await self._pool.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self._pool.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag.
        """
        return await self._pool.execute(sql, *args)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Connection]:
        """
        Acquire one connection and run everything inside a transaction.

        Commits when the block exits normally, rolls back on any exception.
        The connection goes back to the pool either way.
        """
        async with self._pool.acquire() as conn:  # type: asyncpg.Connection
            async with conn.transaction():
                yield Connection(conn)


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("Database is not initialized. The app lifespan must run first.")
    return db
