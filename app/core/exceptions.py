"""
Domain errors raised by the authoring services.

Routers never build HTTP errors for these themselves; ``app.main`` maps each
class to its status code in a single exception handler.
"""
from typing import Optional

from fastapi import status


class AuthoringError(Exception):
    """Base class for errors local to a single authoring operation."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "AUTHORING_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class NotFoundError(AuthoringError):
    """Entity is absent or is not owned by the caller (indistinguishable)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str, code: Optional[str] = None):
        super().__init__(f"{resource} not found", code)
        self.resource = resource


class ConflictError(AuthoringError):
    """Duplicate within scope, or deletion of a referenced/active entity."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class ValidationError(AuthoringError):
    """Malformed input, out-of-range values or foreign ids."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class UpstreamUnavailableError(AuthoringError):
    """The AI or export collaborator failed or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "UPSTREAM_UNAVAILABLE"
