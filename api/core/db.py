"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`). Integration tests open their own
pool against an isolated schema through the same `init_pool()`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Driver failures are re-raised as `StoreError` so callers only ever see the
error kinds from `core.errors`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from core import config
from core.errors import StoreError

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

# Errors that mean "the store failed", as opposed to a bug in our own code.
STORE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    TimeoutError,
)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = config.env_str("DATABASE_URL", "")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def pool_settings() -> dict[str, Any]:
    """
    Pool limits, overridable through the environment.

    - DB_POOL_MIN_SIZE / DB_POOL_MAX_SIZE: idle floor and concurrency ceiling
    - DB_POOL_MAX_INACTIVE_LIFETIME_S: idle connections are closed after this
    - DB_POOL_MAX_QUERIES: a connection is replaced after serving this many queries
    - DB_CONNECT_TIMEOUT_S: connection establishment timeout
    - DB_COMMAND_TIMEOUT_S: optional per-statement timeout (unset = none)
    """
    return {
        "min_size": config.env_int("DB_POOL_MIN_SIZE", 5),
        "max_size": config.env_int("DB_POOL_MAX_SIZE", 25),
        "max_inactive_connection_lifetime": float(config.env_int("DB_POOL_MAX_INACTIVE_LIFETIME_S", 1800)),
        "max_queries": config.env_int("DB_POOL_MAX_QUERIES", 50000),
        "timeout": float(config.env_int("DB_CONNECT_TIMEOUT_S", 10)),
        "command_timeout": config.env_float("DB_COMMAND_TIMEOUT_S", None),
    }


async def init_pool(
    dsn: str | None = None,
    *,
    server_settings: dict[str, str] | None = None,
    **overrides: Any,
) -> asyncpg.Pool:
    global _pool
    if _pool is not None:
        return _pool

    settings = pool_settings()
    settings.update(overrides)
    _pool = await asyncpg.create_pool(
        dsn=_sanitize_database_url(dsn) if dsn else database_url(),
        server_settings=server_settings,
        **settings,
    )
    logger.info(
        "db_pool_opened min_size=%s max_size=%s",
        settings["min_size"],
        settings["max_size"],
    )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None
    logger.info("db_pool_closed")


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """
    Translate driver/network failures raised inside the block into `StoreError`.
    """
    try:
        yield
    except STORE_EXCEPTIONS as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    async with store_errors("fetch_one"):
        row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    async with store_errors("fetch_all"):
        rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def fetch_val(sql: str, *args: Any) -> Any:
    async with store_errors("fetch_val"):
        return await pool().fetchval(sql, *args)


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the command status tag,
    e.g. "DELETE 1".
    """
    async with store_errors("execute"):
        return await pool().execute(sql, *args)


def affected_rows(status: str) -> int:
    """
    Row count from a command status tag ("DELETE 3" -> 3, "INSERT 0 1" -> 1).
    """
    try:
        return int((status or "").rsplit(" ", 1)[-1])
    except ValueError:
        return 0


async def ping() -> bool:
    try:
        return await fetch_val("SELECT 1") == 1
    except (StoreError, RuntimeError):
        logger.warning("db_ping_failed", exc_info=True)
        return False
