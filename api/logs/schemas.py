"""
Log API schemas (request models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LogEntryIn(BaseModel):
    level: str = Field(..., min_length=1, max_length=20)
    message: str = Field(..., min_length=1)
    source: str | None = Field(default=None, max_length=100)
    # Server time is assigned at ingest when omitted.
    timestamp: datetime | None = None


class QueryParams(BaseModel):
    level: str = ""
    source: str = ""
    start_time: str = ""
    end_time: str = ""
    limit: int | None = None
    offset: int | None = None
    search: str = ""


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=3)
    level: str = ""
    source: str = ""
    start_time: str = ""
    end_time: str = ""
    limit: int | None = None
    offset: int | None = None
