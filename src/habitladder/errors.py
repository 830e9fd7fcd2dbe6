"""
Domain exceptions for the habit ladder application.

Services raise these; the error handler middleware maps them to HTTP
responses so route handlers stay free of status-code plumbing.
"""

from __future__ import annotations


class LadderAppError(Exception):
    """Base exception for the application."""


class ValidationError(LadderAppError, ValueError):
    """Raised when a request parameter or payload field is missing or invalid."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


class NotFoundError(LadderAppError):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str, resource_id: object | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ConflictError(LadderAppError):
    """Raised when a write collides with existing state (duplicate, already submitted)."""


class StorageError(LadderAppError):
    """Raised when the database cannot be reached or a query fails."""

    def __init__(self, operation: str, details: str) -> None:
        self.operation = operation
        self.details = details
        super().__init__(f"Database {operation} failed: {details}")


class ForbiddenError(LadderAppError):
    """Raised when a record exists but belongs to another user."""
