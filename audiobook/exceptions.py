"""Application error hierarchy.

Services raise these; ``audiobook.main`` maps each to its HTTP status and
renders ``{"detail": message}`` like FastAPI's own ``HTTPException``.
"""


class AudiobookError(Exception):
    """Base class for errors with a defined HTTP status."""

    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationError(AudiobookError):
    """Missing required field, bad file type and similar input problems."""

    status_code = 400
    message = "Invalid request"


class AuthenticationError(AudiobookError):
    status_code = 401
    message = "Invalid credentials"


class PermissionDeniedError(AudiobookError):
    status_code = 403
    message = "Admin access required"


class NotFoundError(AudiobookError):
    status_code = 404
    message = "Not found"


class ConflictError(AudiobookError):
    """Duplicate natural key (e.g. email). Reported as 400, not 409."""

    status_code = 400
    message = "Resource already exists"
