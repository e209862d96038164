"""
Log ingestion and retrieval logic.

Every call takes the authenticated project explicitly and scopes all reads and
writes to it.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from auth.schemas import AuthenticatedProject
from core.errors import ValidationError

from . import repository, schemas
from .query_builder import clamp_limit, clamp_offset
from .search_parser import parse_search_query

logger = logging.getLogger(__name__)

MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 1000


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_log_entry(row: dict[str, Any]) -> dict[str, Any]:
    entry = {
        "id": row["id"],
        "project_id": row["project_id"],
        "level": row["level"],
        "message": row["message"],
        "source": row["source"],
        "timestamp": row["timestamp"],
    }
    # Only search results carry a relevance score.
    if row.get("rank") is not None:
        entry["rank"] = float(row["rank"])
    return entry


def _page(rows: list[dict[str, Any]], total: int, *, limit: int, offset: int) -> dict[str, Any]:
    return {
        "logs": [_to_log_entry(row) for row in rows],
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + limit < total,
    }


def prepare_batch(project: AuthenticatedProject, entries: list[schemas.LogEntryIn]) -> list[dict[str, Any]]:
    """
    Validate batch size and stamp each entry with a new id, the project id and,
    when missing, the current server time.
    """
    if len(entries) < MIN_BATCH_SIZE or len(entries) > MAX_BATCH_SIZE:
        raise ValidationError(f"batch size must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}")

    now = _utc_now()
    return [
        {
            "id": uuid4(),
            "project_id": project.id,
            "level": entry.level,
            "message": entry.message,
            "source": entry.source,
            "timestamp": _as_utc(entry.timestamp) if entry.timestamp is not None else now,
        }
        for entry in entries
    ]


async def ingest_logs(project: AuthenticatedProject, entries: list[schemas.LogEntryIn]) -> dict[str, Any]:
    records = prepare_batch(project, entries)
    await repository.insert_logs_batch(records)

    logger.info("logs_ingested project_id=%s count=%s", project.id, len(records))
    return {"message": "logs stored", "count": len(records)}


async def query_logs(project: AuthenticatedProject, params: schemas.QueryParams) -> dict[str, Any]:
    """
    Filtered, paginated listing. A non-empty `search` switches to full-text search.
    """
    if params.search:
        request = schemas.SearchRequest.model_construct(
            query=params.search,
            level=params.level,
            source=params.source,
            start_time=params.start_time,
            end_time=params.end_time,
            limit=params.limit,
            offset=params.offset,
        )
        page = await search_logs(project, request)
        page.pop("query_time_ms", None)
        return page

    limit = clamp_limit(params.limit)
    offset = clamp_offset(params.offset)
    rows, total = await repository.query_logs(
        project.id,
        level=params.level,
        source=params.source,
        start_time=params.start_time,
        end_time=params.end_time,
        limit=limit,
        offset=offset,
    )
    return _page(rows, total, limit=limit, offset=offset)


async def search_logs(project: AuthenticatedProject, request: schemas.SearchRequest) -> dict[str, Any]:
    started = time.perf_counter()
    ts_query = parse_search_query(request.query)
    limit = clamp_limit(request.limit)
    offset = clamp_offset(request.offset)

    rows, total = await repository.search_logs(
        project.id,
        ts_query,
        level=request.level,
        source=request.source,
        start_time=request.start_time,
        end_time=request.end_time,
        limit=limit,
        offset=offset,
    )
    page = _page(rows, total, limit=limit, offset=offset)
    page["query_time_ms"] = int((time.perf_counter() - started) * 1000)
    return page
