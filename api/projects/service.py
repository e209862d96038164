"""
Project business logic.
"""

from __future__ import annotations

import logging
from uuid import UUID

from auth import security
from core.errors import NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)


def parse_project_id(raw_id: str) -> UUID:
    try:
        return UUID((raw_id or "").strip())
    except ValueError as exc:
        raise ValidationError("invalid project ID") from exc


def _to_project_response(row: dict) -> schemas.ProjectResponse:
    return schemas.ProjectResponse(
        id=row["id"],
        name=str(row["name"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def create_project(payload: schemas.CreateProjectRequest) -> schemas.CreatedProjectResponse:
    api_key = security.build_api_key()
    row = await repository.create_project(
        name=payload.name,
        api_key_hash=security.hash_api_key(api_key),
    )
    logger.info("project_created project_id=%s name=%r", row["id"], row["name"])
    return schemas.CreatedProjectResponse(
        **_to_project_response(row).model_dump(),
        api_key=api_key,
    )


async def list_projects() -> schemas.ProjectsResponse:
    rows = await repository.list_projects()
    projects = [_to_project_response(row) for row in rows]
    return schemas.ProjectsResponse(projects=projects, total=len(projects))


async def get_project(raw_id: str) -> schemas.ProjectResponse:
    project_id = parse_project_id(raw_id)
    row = await repository.get_project_by_id(project_id)
    if row is None:
        raise NotFoundError("project not found")
    return _to_project_response(row)


async def delete_project(raw_id: str) -> dict[str, str]:
    project_id = parse_project_id(raw_id)
    deleted = await repository.delete_project(project_id)
    if not deleted:
        raise NotFoundError("project not found")

    logger.info("project_deleted project_id=%s", project_id)
    return {"message": "project deleted"}
