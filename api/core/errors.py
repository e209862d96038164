"""
Error kinds raised by services and repositories.

Routers never build error responses themselves; `main.py` registers one
exception handler per kind. Only `ValidationError` and `NotFoundError` carry a
client-facing message; auth and storage failures answer with fixed generic
text.
"""

from __future__ import annotations


class LogVaultError(RuntimeError):
    pass


class ValidationError(LogVaultError):
    """Malformed client input (bad timestamp, search query, batch size, id)."""


class AuthError(LogVaultError):
    """Missing or invalid API key."""


class NotFoundError(LogVaultError):
    pass


class StoreError(LogVaultError):
    """Connectivity, timeout or constraint failure reported by the store."""


class BatchInsertError(StoreError):
    def __init__(self, failed_index: int, total: int) -> None:
        super().__init__(f"failed to insert log at index {failed_index}/{total}")
        self.failed_index = failed_index
        self.total = total
