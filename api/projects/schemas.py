"""
Project API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=255)


class ProjectResponse(BaseModel):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class CreatedProjectResponse(ProjectResponse):
    # Only returned once, at creation. The store keeps a digest.
    api_key: str


class ProjectsResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int
