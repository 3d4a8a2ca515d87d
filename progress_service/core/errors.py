"""Error taxonomy for the progress engine.

Services raise these; the HTTP layer renders them as
``{"success": false, "message": ...}`` with the matching status code.
Validation errors are raised before any aggregate is written, so a
request rejected with 400 never leaves partial state behind.
"""

from __future__ import annotations

from fastapi import status


class ProgressError(Exception):
    """Base class for every error the engine reports to a caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(ProgressError):
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidArgument(ProgressError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(ProgressError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ProgressError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ProgressError):
    status_code = status.HTTP_409_CONFLICT


class Internal(ProgressError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
