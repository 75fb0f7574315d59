"""
Domain errors raised by services and rendered by the exception handlers in main.

Every rejected precondition maps to exactly one of these kinds so callers can
tell them apart by status code and the ``error`` field of the response body.
"""
from datetime import datetime, timezone
from typing import Any


class NeighboError(Exception):
    """Base class for errors that are safe to show to API callers."""

    status_code: int = 500
    error: str = "internal_server_error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> dict:
        return {"error": self.error, "message": self.message, **self.extra}


class BadRequestError(NeighboError):
    status_code = 400
    error = "bad_request"


class UnauthorizedError(NeighboError):
    status_code = 401
    error = "unauthorized"


class ForbiddenError(NeighboError):
    status_code = 403
    error = "forbidden"


class NotFoundError(NeighboError):
    status_code = 404
    error = "not_found"


class ConflictError(NeighboError):
    status_code = 409
    error = "conflict"


class RateLimitedError(NeighboError):
    """A report was submitted while the previous one is still cooling down."""

    status_code = 429
    error = "rate_limited"

    def __init__(self, message: str, next_allowed_at: datetime):
        # Same "Z" suffix pydantic uses for timestamps in response bodies
        iso = next_allowed_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        super().__init__(message, nextReportAllowedAt=iso)
        self.next_allowed_at = next_allowed_at


class ServiceUnavailableError(NeighboError):
    status_code = 503
    error = "service_unavailable"
