"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `user_address_api/main.py`). Repositories do not
reach for the pool themselves; they are handed a `Database`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import asyncpg

from . import settings
from .errors import StorageUnavailable

logger = logging.getLogger(__name__)

# Failures of the executor itself, as opposed to a statement being rejected.
_UNAVAILABLE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.InterfaceError,
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
)

_pool: asyncpg.Pool | None = None


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    Thin executor over an asyncpg pool.

    Each call acquires a connection for one statement and releases it; nothing
    is held across a multi-step sequence.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self._pool.fetchrow(sql, *args)
        except _UNAVAILABLE_ERRORS as exc:
            raise StorageUnavailable(f"Database call failed: {exc}") from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self._pool.fetch(sql, *args)
        except _UNAVAILABLE_ERRORS as exc:
            raise StorageUnavailable(f"Database call failed: {exc}") from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return asyncpg's status tag,
        e.g. "DELETE 3".
        """
        try:
            return await self._pool.execute(sql, *args)
        except _UNAVAILABLE_ERRORS as exc:
            raise StorageUnavailable(f"Database call failed: {exc}") from exc


def affected_rows(status_tag: str | None) -> int:
    """
    Parse the row count out of a command tag such as "DELETE 2" or "INSERT 0 1".
    """
    if not status_tag:
        return 0
    last = status_tag.strip().rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    try:
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url(),
            min_size=settings.pool_min_size(),
            max_size=settings.pool_max_size(),
            command_timeout=settings.command_timeout(),
        )
    except _UNAVAILABLE_ERRORS as exc:
        raise StorageUnavailable(f"Could not create DB pool: {exc}") from exc
    logger.info(
        "db_pool_ready min_size=%s max_size=%s",
        settings.pool_min_size(),
        settings.pool_max_size(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None
    logger.info("db_pool_closed")


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise StorageUnavailable("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def database() -> Database:
    return Database(pool())
