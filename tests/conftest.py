"""Shared test fixtures."""

from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from auth import dependencies as auth_dependencies
from auth.schemas import AuthenticatedProject

PROJECT_ID = UUID("a0eebc99-9c0b-4ef8-bb6d-6bb9bd380a11")


@pytest.fixture
def project() -> AuthenticatedProject:
    return AuthenticatedProject(id=PROJECT_ID, name="Test Project")


@pytest.fixture
def app() -> Generator[FastAPI]:
    """The API app with its DB lifespan disabled."""
    from main import app as fastapi_app

    original_lifespan = fastapi_app.router.lifespan_context

    @asynccontextmanager
    async def _test_lifespan(_: FastAPI) -> AsyncGenerator[None]:
        yield

    fastapi_app.router.lifespan_context = _test_lifespan
    try:
        yield fastapi_app
    finally:
        fastapi_app.router.lifespan_context = original_lifespan
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(app: FastAPI) -> Generator[TestClient]:
    """TestClient that goes through real API key authentication."""
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def client(app: FastAPI, project: AuthenticatedProject) -> Generator[TestClient]:
    """TestClient already authenticated as `project`."""
    app.dependency_overrides[auth_dependencies.get_current_project] = lambda: project
    with TestClient(app) as tc:
        yield tc
