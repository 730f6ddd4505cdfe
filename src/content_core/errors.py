"""Typed service errors shared by the entity services and the HTTP layer."""
from typing import Optional


class ContentServiceError(Exception):
    """Base class for errors with a stable code and message."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code}: {self.message}>"


class NotFoundError(ContentServiceError):
    """Raised when a project, task, comment or membership is absent."""

    code = "NOT_FOUND"


class ForbiddenError(ContentServiceError):
    """Raised when the caller is not allowed to perform the operation."""

    code = "FORBIDDEN"


class ValidationError(ContentServiceError):
    """Raised for malformed input or unresolvable state.

    Carries optional field-level details as a list of
    ``{"path": ..., "message": ...}`` mappings.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[list[dict]] = None):
        super().__init__(message)
        self.details = details or []


class AuthError(ContentServiceError):
    """Raised when the caller identity headers are missing."""

    code = "UNAUTHORIZED"
