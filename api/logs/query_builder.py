"""
WHERE-clause builder for log queries.

Conditions and their arguments are accumulated together, so the n-th
placeholder always lines up with the n-th argument. Column names come from the
constants below, never from the request; every request value goes through a
placeholder.

Example:
    qb = QueryBuilder()
    qb.add_condition(COLUMN_PROJECT_ID, project_id)
    qb.add_condition(COLUMN_LEVEL, "error")
    qb.where_clause()  -> "WHERE project_id = $1 AND level = $2"
    qb.args()          -> [project_id, "error"]
    qb.next_arg_num()  -> 3
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from core.errors import ValidationError

COLUMN_ID = "id"
COLUMN_PROJECT_ID = "project_id"
COLUMN_LEVEL = "level"
COLUMN_MESSAGE = "message"
COLUMN_SOURCE = "source"
COLUMN_TIMESTAMP = "timestamp"

# Text search configuration; must match the GIN index expression in the migration.
TEXT_SEARCH_CONFIG = "english"

DEFAULT_LIMIT = 50
MAX_LIMIT = 1000
# OFFSET is bound as int8.
MAX_OFFSET = 2**63 - 1

_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp ("2024-11-22T10:30:00Z", "2024-11-22T10:30:00.5+02:00").

    A timezone designator is mandatory. Fractions beyond microseconds are truncated.
    """
    match = _RFC3339_RE.match((value or "").strip())
    if match is None:
        raise ValueError(f"{value!r} is not an RFC 3339 timestamp")

    frac = (match.group("frac") or "")[:6]
    tz = match.group("tz")
    iso = f"{match.group('date')}T{match.group('time')}"
    if frac:
        iso += "." + frac.ljust(6, "0")
    iso += "+00:00" if tz in {"Z", "z"} else tz

    parsed = datetime.fromisoformat(iso)
    return parsed.astimezone(timezone.utc)


def clamp_limit(limit: int | None, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    if limit is None or limit <= 0:
        return default
    if limit > maximum:
        return maximum
    return limit


def clamp_offset(offset: int | None, maximum: int = MAX_OFFSET) -> int:
    if offset is None or offset < 0:
        return 0
    if offset > maximum:
        raise ValidationError("offset out of range")
    return offset


class QueryBuilder:
    def __init__(self) -> None:
        self._conditions: list[str] = []
        self._args: list[Any] = []
        self._arg_count = 1

    def _append(self, condition_template: str, value: Any) -> int:
        slot = self._arg_count
        self._conditions.append(condition_template.format(slot=f"${slot}"))
        self._args.append(value)
        self._arg_count += 1
        return slot

    def add_condition(self, column: str, value: Any) -> None:
        """
        Add `column = $N`. Callers only add filters the request actually set.
        """
        self._append(f"{column} = {{slot}}", value)

    def add_time_range(self, column: str, start: str | None, end: str | None) -> None:
        """
        Add inclusive `column >= $N` / `column <= $M` bounds; either may be empty.

        Both bounds are parsed before anything is appended, so a malformed
        bound leaves the builder untouched.
        """
        start_time = self._parse_bound("start_time", start)
        end_time = self._parse_bound("end_time", end)

        if start_time is not None:
            self._append(f"{column} >= {{slot}}", start_time)
        if end_time is not None:
            self._append(f"{column} <= {{slot}}", end_time)

    @staticmethod
    def _parse_bound(name: str, value: str | None) -> datetime | None:
        raw = (value or "").strip()
        if not raw:
            return None
        try:
            return parse_rfc3339(raw)
        except ValueError as exc:
            raise ValidationError(
                f"invalid {name}: expected RFC 3339 format (e.g. 2024-11-22T10:30:00Z)"
            ) from exc

    def add_full_text_search(self, ts_query: str) -> int:
        """
        Add the full-text predicate over `message`.

        `ts_query` must already be in tsquery syntax ("hello & world"), see
        `logs.search_parser`. Returns the placeholder number holding it so the
        caller can reuse it for ranking.
        """
        return self._append(
            f"to_tsvector('{TEXT_SEARCH_CONFIG}', {COLUMN_MESSAGE}) "
            f"@@ to_tsquery('{TEXT_SEARCH_CONFIG}', {{slot}})",
            ts_query,
        )

    def where_clause(self) -> str:
        if not self._conditions:
            return ""
        return "WHERE " + " AND ".join(self._conditions)

    def args(self) -> list[Any]:
        return list(self._args)

    def next_arg_num(self) -> int:
        return self._arg_count
