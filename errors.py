"""
Application error base and storage-level errors.

``AppError`` subclasses carry a stable ``code``, the HTTP status they map to
and the message shown to clients.  The handler in ``api.middleware``
renders them as ``{"error": message}``.
"""

from __future__ import annotations

from fastapi import status


class AppError(Exception):
    code = "app_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class StoreUnavailable(AppError):
    code = "store_unavailable"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong"


class DuplicateKey(Exception):
    """Raised by a store when a unique index rejects an insert."""
