"""
API error hierarchy.

Handlers raise these; the application-level exception handlers in
``mamacita.app`` turn them into the response envelope.
"""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self, include_details: bool = False) -> dict:
        error = {"code": self.code, "message": self.message}
        if include_details and self.details is not None:
            error["details"] = self.details
        return error


class ValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"


class Unauthenticated(ApiError):
    status_code = 401
    code = "UNAUTHENTICATED"


class Forbidden(ApiError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(ApiError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(ApiError):
    status_code = 409
    code = "CONFLICT"


class RateLimited(ApiError):
    status_code = 429
    code = "RATE_LIMITED"


class InternalError(ApiError):
    status_code = 500
    code = "INTERNAL_SERVER_ERROR"
