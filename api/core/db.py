"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import asyncpg

from core.config import Settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

# Driver failures the query helpers translate into DatabaseError.
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class DatabaseError(RuntimeError):
    pass


def connect_kwargs(settings: Settings) -> dict[str, Any]:
    """
    Connection parameters for asyncpg, passed separately so hosts that do
    not fit in a URL (socket directories, IPv6 literals) reach asyncpg unchanged.
    """
    return {
        "host": settings.pg_db_host,
        "port": settings.pg_db_port,
        "user": settings.pg_username,
        "password": settings.pg_password,
        "database": settings.pg_db_name,
    }


def _log_query(record: Any) -> None:
    elapsed_ms = float(getattr(record, "elapsed", 0.0) or 0.0) * 1000.0
    if getattr(record, "exception", None) is not None:
        logger.warning(
            "sql_query_failed elapsed_ms=%.2f sql=%s error=%s",
            elapsed_ms,
            " ".join(str(record.query).split()),
            record.exception,
        )
        return
    logger.info("sql_query elapsed_ms=%.2f sql=%s", elapsed_ms, " ".join(str(record.query).split()))


async def _setup_connection(conn: asyncpg.Connection) -> None:
    conn.add_query_logger(_log_query)


async def init_pool(settings: Settings, *, schema: Iterable[str] = ()) -> None:
    """
    Open the pool and bring the schema up to date.

    One connection attempt only; errors propagate so startup aborts.
    """
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        **connect_kwargs(settings),
        min_size=settings.pg_pool_min_size,
        max_size=settings.pg_pool_max_size,
        init=_setup_connection if settings.log_queries else None,
    )
    logger.info(
        "db_pool_ready host=%s port=%s db=%s",
        settings.pg_db_host,
        settings.pg_db_port,
        settings.pg_db_name,
    )
    await ensure_schema(schema)


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


async def ensure_schema(statements: Iterable[str]) -> None:
    """
    Run idempotent DDL (CREATE ... IF NOT EXISTS / ADD COLUMN IF NOT EXISTS).
    """
    for statement in statements:
        await execute(statement)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    try:
        row = await pool().fetchrow(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise DatabaseError(str(exc)) from exc
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    try:
        rows = await pool().fetch(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise DatabaseError(str(exc)) from exc
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> None:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
    """
    try:
        await pool().execute(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise DatabaseError(str(exc)) from exc

