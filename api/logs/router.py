"""
Log API endpoints (API key required).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from auth.schemas import AuthenticatedProject

from . import schemas, service

router = APIRouter()


@router.post("/logs", status_code=status.HTTP_201_CREATED)
async def ingest_logs(
    entries: list[schemas.LogEntryIn],
    project: AuthenticatedProject = Depends(auth_dependencies.get_current_project),
) -> dict:
    """
    Store a batch of 1-1000 log entries; all of them or none.
    """
    return await service.ingest_logs(project, entries)


@router.get("/logs")
async def list_logs(
    level: str = Query(default=""),
    source: str = Query(default=""),
    start_time: str = Query(default=""),
    end_time: str = Query(default=""),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
    search: str = Query(default=""),
    project: AuthenticatedProject = Depends(auth_dependencies.get_current_project),
) -> dict:
    """
    Newest-first page of the project's logs. `search` switches to relevance order.
    """
    params = schemas.QueryParams(
        level=level,
        source=source,
        start_time=start_time,
        end_time=end_time,
        limit=limit,
        offset=offset,
        search=search,
    )
    return await service.query_logs(project, params)


@router.post("/search")
async def search_logs(
    request: schemas.SearchRequest,
    project: AuthenticatedProject = Depends(auth_dependencies.get_current_project),
) -> dict:
    return await service.search_logs(project, request)
