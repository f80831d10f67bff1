"""Domain exceptions and their rendering as failure envelopes.

Every failure a caller can see is a ``TourServiceError``. The application
registers ``service_error_handler`` so these never escape as raw faults: the
caller always receives ``{"success": false, "message": ..., "error": {...}}``
where ``error`` follows the RFC 9457 Problem Details shape.

https://tools.ietf.org/rfc/rfc9457.txt
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .observability import get_logger

PROBLEM_BASE_URI = "https://guided-tours.example.com/problems"

logger = get_logger(__name__)


class TourServiceError(Exception):
    """
    Base class for failures reported to callers.

    Attributes:
        status_code: HTTP status used for the failure envelope
        code: Stable machine-readable error code
        title: Short, human-readable summary of the problem type
        detail: Human-readable explanation specific to this occurrence
        extensions: Additional problem-specific information
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    title: str = "Internal Server Error"
    slug: str = "internal-error"

    def __init__(self, detail: str, extensions: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extensions = extensions or {}

    @property
    def problem_details(self) -> Dict[str, Any]:
        problem = {
            "type": f"{PROBLEM_BASE_URI}/{self.slug}",
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
            "code": self.code,
        }
        problem.update(self.extensions)
        return problem

    def to_envelope(self) -> Dict[str, Any]:
        return {
            "success": False,
            "message": self.detail,
            "error": self.problem_details,
        }


class NotFoundError(TourServiceError):
    """Referenced entity is absent or its id is malformed."""

    status_code = 404
    code = "NOT_FOUND"
    title = "Resource Not Found"
    slug = "resource-not-found"

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions: Dict[str, Any] = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(detail, extensions)


class UnauthorizedError(TourServiceError):
    """Entity exists but the caller does not own it."""

    status_code = 403
    code = "UNAUTHORIZED"
    title = "Access Forbidden"
    slug = "access-forbidden"

    def __init__(self, detail: str = "Unauthorized", resource_type: Optional[str] = None):
        extensions = {"resource_type": resource_type} if resource_type else None
        super().__init__(detail, extensions)


class InvalidStateError(TourServiceError):
    """Operation is not valid for the entity's current state."""

    status_code = 409
    code = "INVALID_STATE"
    title = "Invalid State"
    slug = "invalid-state"

    def __init__(self, detail: str, current_state: Optional[str] = None):
        extensions = {"current_state": current_state} if current_state else None
        super().__init__(detail, extensions)


class ConflictError(TourServiceError):
    """Request conflicts with existing data or with a concurrent write."""

    status_code = 409
    code = "CONFLICT"
    title = "Resource Conflict"
    slug = "resource-conflict"

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
    ):
        extensions = {"conflicting_resource": conflicting_resource} if conflicting_resource else None
        super().__init__(detail, extensions)


class PersistenceError(TourServiceError):
    """The store was unreachable or rejected a write."""

    status_code = 503
    code = "PERSISTENCE_FAILURE"
    title = "Persistence Failure"
    slug = "persistence-failure"

    def __init__(self, detail: str = "The data store could not complete the operation", operation: Optional[str] = None):
        extensions = {"operation": operation} if operation else None
        super().__init__(detail, extensions)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def service_error_handler(request: Request, exc: TourServiceError) -> JSONResponse:
    """
    Render a domain failure as a failure envelope.

    Args:
        request: FastAPI request object
        exc: Domain exception raised by a service

    Returns:
        JSONResponse: Failure envelope with problem details
    """
    content = exc.to_envelope()
    content["error"]["instance"] = request.url.path
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation errors as a failure envelope with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "The request data failed validation",
            "error": {
                "type": f"{PROBLEM_BASE_URI}/validation-error",
                "title": "Validation Error",
                "status": 422,
                "code": "VALIDATION_ERROR",
                "instance": request.url.path,
                "violations": violations,
            },
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Convert unhandled exceptions into an internal-error failure envelope.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Failure envelope carrying an error id for log correlation
    """
    error_id = str(uuid.uuid4())
    logger.exception(
        "unhandled_exception",
        error_id=error_id,
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "An unexpected error occurred while processing the request",
            "error": {
                "type": f"{PROBLEM_BASE_URI}/internal-error",
                "title": "Internal Server Error",
                "status": 500,
                "code": "INTERNAL_ERROR",
                "instance": request.url.path,
                "error_id": error_id,
                "timestamp": _utc_timestamp(),
            },
        },
    )
