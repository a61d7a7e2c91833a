"""Error taxonomy for the API and the handlers that render it as JSON."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TaskboardError(Exception):
    """Base exception for the API.

    Every failure a handler can produce is one of these subclasses; the
    registered handler turns it into ``{"error": ..., "code": ...}``.
    """

    status_code = 500
    code = "TASKBOARD_ERROR"

    def __init__(
        self,
        message: str,
        headers: Optional[Dict[str, str]] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.headers = headers
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response dict."""
        result: Dict[str, Any] = {
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(TaskboardError):
    """Malformed input: wrong types, bad ids, missing or failing fields."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(TaskboardError):
    """Missing or bad bearer token, or credentials matching no account."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(TaskboardError):
    """Authenticated, the resource exists, but the caller does not own it."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(TaskboardError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(TaskboardError):
    """Uniqueness violation, detected up front or by the unique index."""

    status_code = 409
    code = "CONFLICT"


class StoreError(TaskboardError):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


async def taskboard_exception_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request schema failures as a 400 with a field-level summary."""
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return await taskboard_exception_handler(
        request,
        ValidationError("Invalid input format", details=details),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": StoreError.code},
    )
