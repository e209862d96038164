"""
API key authentication.
"""

from __future__ import annotations

import logging

from core.errors import AuthError
from projects import repository as project_repository

from . import schemas, security

logger = logging.getLogger(__name__)

# Same text for every failure, whether or not the key exists.
INVALID_API_KEY = "invalid or missing API key"


async def authenticate_api_key(api_key: str | None) -> schemas.AuthenticatedProject:
    """
    Resolve an API key to its project. Any miss (empty, malformed, unknown)
    raises the same `AuthError`.
    """
    raw = (api_key or "").strip()
    if not security.looks_like_api_key(raw):
        raise AuthError(INVALID_API_KEY)

    row = await project_repository.get_project_by_api_key_hash(security.hash_api_key(raw))
    if row is None:
        logger.info("auth_rejected reason=unknown_key")
        raise AuthError(INVALID_API_KEY)

    return schemas.AuthenticatedProject(id=row["id"], name=str(row["name"]))
