"""
Log persistence (raw SQL).

Queries return rows plus `COUNT(*) OVER()` so a page and the total number of
matches come back in one round trip.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from uuid import UUID

import asyncpg

from core import db
from core.errors import BatchInsertError, StoreError, ValidationError

from .query_builder import (
    COLUMN_ID,
    COLUMN_LEVEL,
    COLUMN_MESSAGE,
    COLUMN_PROJECT_ID,
    COLUMN_SOURCE,
    COLUMN_TIMESTAMP,
    TEXT_SEARCH_CONFIG,
    QueryBuilder,
)

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = ", ".join(
    (COLUMN_ID, COLUMN_PROJECT_ID, COLUMN_LEVEL, COLUMN_MESSAGE, COLUMN_SOURCE, COLUMN_TIMESTAMP)
)

INSERT_LOG_SQL = f"""
    INSERT INTO logs ({_SELECT_COLUMNS})
    VALUES ($1, $2, $3, $4, $5, $6)
"""


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def filters_for_project(
    project_id: UUID,
    *,
    level: str = "",
    source: str = "",
    start_time: str = "",
    end_time: str = "",
    ts_query: str = "",
) -> tuple[QueryBuilder, int | None]:
    """
    Build the WHERE clause shared by listing and search.

    The project condition is always first, so it is always $1. Returns the
    builder and the placeholder number of the search expression (None when
    there is no search).
    """
    qb = QueryBuilder()
    qb.add_condition(COLUMN_PROJECT_ID, project_id)

    search_slot = None
    if ts_query:
        search_slot = qb.add_full_text_search(ts_query)
    if level:
        qb.add_condition(COLUMN_LEVEL, level)
    if source:
        qb.add_condition(COLUMN_SOURCE, source)
    qb.add_time_range(COLUMN_TIMESTAMP, start_time, end_time)
    return qb, search_slot


def _is_tsquery_syntax_error(exc: BaseException | None) -> bool:
    return isinstance(exc, asyncpg.exceptions.PostgresSyntaxError) and "tsquery" in str(exc).lower()


def _insert_record(entry: dict[str, Any]) -> tuple[Any, ...]:
    return (
        entry["id"],
        entry["project_id"],
        entry["level"],
        entry["message"],
        entry.get("source"),
        entry["timestamp"],
    )


async def _find_failing_index(conn: asyncpg.Connection, records: list[tuple[Any, ...]]) -> int:
    """
    Replay `records` one by one in a transaction that is always rolled back and
    return the index of the first one the store rejects (-1 if none does).
    """
    tr = conn.transaction()
    await tr.start()
    try:
        stmt = await conn.prepare(INSERT_LOG_SQL)
        for index, record in enumerate(records):
            try:
                await stmt.fetch(*record)
            except asyncpg.PostgresError:
                return index
        return -1
    finally:
        await tr.rollback()


async def insert_logs_batch(entries: list[dict[str, Any]]) -> None:
    """
    Insert log entries atomically on one connection.

    Each entry needs id, project_id, level, message, source, timestamp. The
    whole batch goes out in one `executemany` inside a single transaction, so
    any failure stores nothing. On failure the batch is replayed row by row
    (and rolled back again) to find the offending entry, and
    `BatchInsertError` carries its index. An empty list is a no-op.
    """
    if not entries:
        return

    started = time.perf_counter()
    total = len(entries)
    records = [_insert_record(entry) for entry in entries]

    async with db.store_errors("insert_logs_batch"):
        async with db.pool().acquire() as conn:  # type: asyncpg.Connection
            try:
                async with conn.transaction():
                    await conn.executemany(INSERT_LOG_SQL, records)
            except asyncpg.PostgresError as exc:
                failed_index = await _find_failing_index(conn, records)
                raise BatchInsertError(failed_index, total) from exc

    logger.info("insert_logs_batch count=%s duration_ms=%s", total, _elapsed_ms(started))


async def _count_matches(qb: QueryBuilder) -> int:
    value = await db.fetch_val(f"SELECT count(*) FROM logs {qb.where_clause()}", *qb.args())
    return int(value or 0)


async def _fetch_page(sql: str, qb: QueryBuilder, *, limit: int, offset: int) -> tuple[list[dict[str, Any]], int]:
    rows = await db.fetch_all(sql, *qb.args(), limit, offset)
    if rows:
        total = int(rows[0]["total_count"])
    elif offset > 0:
        # Past the last page the window count has no row to ride on.
        total = await _count_matches(qb)
    else:
        total = 0

    for row in rows:
        row.pop("total_count", None)
    return rows, total


async def query_logs(
    project_id: UUID,
    *,
    level: str = "",
    source: str = "",
    start_time: str = "",
    end_time: str = "",
    limit: int,
    offset: int,
) -> tuple[list[dict[str, Any]], int]:
    """
    Filtered page of a project's logs, newest first. Returns (rows, total).
    """
    started = time.perf_counter()
    qb, _ = filters_for_project(
        project_id,
        level=level,
        source=source,
        start_time=start_time,
        end_time=end_time,
    )
    limit_slot = qb.next_arg_num()

    # Only constants and placeholders are interpolated; values travel as args.
    sql = f"""
        SELECT
          {_SELECT_COLUMNS},
          COUNT(*) OVER() AS total_count
        FROM logs
        {qb.where_clause()}
        ORDER BY {COLUMN_TIMESTAMP} DESC, {COLUMN_ID} DESC
        LIMIT ${limit_slot}
        OFFSET ${limit_slot + 1}
    """
    rows, total = await _fetch_page(sql, qb, limit=limit, offset=offset)

    logger.info(
        "query_logs project_id=%s level=%r source=%r rows=%s total=%s duration_ms=%s",
        project_id,
        level,
        source,
        len(rows),
        total,
        _elapsed_ms(started),
    )
    return rows, total


async def search_logs(
    project_id: UUID,
    ts_query: str,
    *,
    level: str = "",
    source: str = "",
    start_time: str = "",
    end_time: str = "",
    limit: int,
    offset: int,
) -> tuple[list[dict[str, Any]], int]:
    """
    Full-text search within a project, best match first.

    `ts_query` must already be normalized (see `logs.search_parser`). Rows
    carry a `rank` from `ts_rank`; ties are broken by newest timestamp. A
    query PostgreSQL cannot parse as tsquery raises `ValidationError`.
    """
    started = time.perf_counter()
    qb, search_slot = filters_for_project(
        project_id,
        level=level,
        source=source,
        start_time=start_time,
        end_time=end_time,
        ts_query=ts_query,
    )
    limit_slot = qb.next_arg_num()

    sql = f"""
        SELECT
          {_SELECT_COLUMNS},
          ts_rank(
            to_tsvector('{TEXT_SEARCH_CONFIG}', {COLUMN_MESSAGE}),
            to_tsquery('{TEXT_SEARCH_CONFIG}', ${search_slot})
          )::float8 AS rank,
          COUNT(*) OVER() AS total_count
        FROM logs
        {qb.where_clause()}
        ORDER BY rank DESC, {COLUMN_TIMESTAMP} DESC, {COLUMN_ID} DESC
        LIMIT ${limit_slot}
        OFFSET ${limit_slot + 1}
    """
    try:
        rows, total = await _fetch_page(sql, qb, limit=limit, offset=offset)
    except StoreError as exc:
        if not _is_tsquery_syntax_error(exc.__cause__):
            raise
        logger.warning("search_logs rejected ts_query=%r error=%s", ts_query, exc.__cause__)
        raise ValidationError("invalid search query") from exc

    logger.info(
        "search_logs project_id=%s ts_query=%r rows=%s total=%s duration_ms=%s",
        project_id,
        ts_query,
        len(rows),
        total,
        _elapsed_ms(started),
    )
    return rows, total
