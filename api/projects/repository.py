"""
Project persistence (raw SQL).
"""

from __future__ import annotations

from uuid import UUID

from core import db

_PROJECT_COLUMNS = "id, name, created_at, updated_at"


async def create_project(*, name: str, api_key_hash: str) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO projects (name, api_key_hash)
        VALUES ($1, $2)
        RETURNING {_PROJECT_COLUMNS}
        """,
        name,
        api_key_hash,
    )
    if row is None:
        raise RuntimeError("Failed to create project.")
    return row


async def list_projects() -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_PROJECT_COLUMNS}
        FROM projects
        ORDER BY created_at DESC, id DESC
        """
    )


async def get_project_by_id(project_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_PROJECT_COLUMNS}
        FROM projects
        WHERE id = $1
        """,
        project_id,
    )


async def get_project_by_api_key_hash(api_key_hash: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_PROJECT_COLUMNS}
        FROM projects
        WHERE api_key_hash = $1
        """,
        api_key_hash,
    )


async def delete_project(project_id: UUID) -> bool:
    """
    Delete a project; its logs go with it (ON DELETE CASCADE).
    Returns False when no project has this id.
    """
    status = await db.execute("DELETE FROM projects WHERE id = $1", project_id)
    return db.affected_rows(status) > 0
