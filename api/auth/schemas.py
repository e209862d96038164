"""
Auth types shared with the feature routers.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthenticatedProject:
    """
    The project an API key resolved to. Routers pass it explicitly into
    service calls; it is the only tenant scope those calls use.
    """

    id: UUID
    name: str
