"""
Project API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from . import schemas, service

router = APIRouter()


@router.post(
    "/projects",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.CreatedProjectResponse,
)
async def create_project(payload: schemas.CreateProjectRequest) -> schemas.CreatedProjectResponse:
    """
    Create a project. The returned `api_key` is not retrievable later.
    """
    return await service.create_project(payload)


@router.get("/projects", response_model=schemas.ProjectsResponse)
async def list_projects() -> schemas.ProjectsResponse:
    return await service.list_projects()


@router.get("/projects/{project_id}", response_model=schemas.ProjectResponse)
async def get_project(project_id: str) -> schemas.ProjectResponse:
    return await service.get_project(project_id)


@router.delete("/projects/{project_id}")
async def delete_project(project_id: str) -> dict:
    """
    Delete a project and all of its logs.
    """
    return await service.delete_project(project_id)
