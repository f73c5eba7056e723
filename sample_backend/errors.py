"""
Error types raised by the service layers.

Each error carries the HTTP status it maps to; the application's exception
handlers turn them into the ``{"success": false, "error": ...}`` envelope.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for request-scoped failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 422


class AuthError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class StorageError(ApiError):
    """Any failure reported by the database engine."""

    status_code = 500


class IntegrityViolation(StorageError):
    """A constraint (e.g. UNIQUE) rejected the statement."""
