"""
Search query normalization.

Turns a user's free-text query into PostgreSQL tsquery syntax:

    "Hello World"              -> "hello & world"
    "database error timeout"   -> "database & error & timeout"
    "a database b error"       -> "database & error"

Quotes and parentheses are stripped because they carry meaning in tsquery
syntax; every surviving term is lowercased and ANDed.
"""

from __future__ import annotations

from core.errors import ValidationError

DEFAULT_MIN_LENGTH = 3
DEFAULT_MAX_LENGTH = 1000
MIN_TERM_LENGTH = 2
TERM_SEPARATOR = " & "

_STRIP_CHARS = str.maketrans("", "", "\"'()")


class SearchQueryParser:
    def __init__(
        self,
        *,
        min_length: int = DEFAULT_MIN_LENGTH,
        max_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self.min_length = min_length
        self.max_length = max_length

    def parse(self, query: str) -> str:
        """
        Validate and normalize `query`. Raises `ValidationError` when the query
        is too short, too long, or has no usable terms.
        """
        query = (query or "").strip()

        if len(query) < self.min_length:
            raise ValidationError(f"search query too short (min {self.min_length} characters)")
        if len(query) > self.max_length:
            raise ValidationError(f"search query too long (max {self.max_length} characters)")

        words = self.sanitize(query).split()
        if not words:
            raise ValidationError("search query is empty")

        terms = [word.lower() for word in words if len(word) >= MIN_TERM_LENGTH]
        if not terms:
            raise ValidationError("no valid search terms")

        return TERM_SEPARATOR.join(terms)

    @staticmethod
    def sanitize(query: str) -> str:
        return query.translate(_STRIP_CHARS)


_default_parser = SearchQueryParser()


def parse_search_query(query: str) -> str:
    return _default_parser.parse(query)
