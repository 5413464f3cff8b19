"""
Custom Exceptions for Capstone Hub
==================================

Every domain error carries the HTTP status it should surface with and an
optional `meta` payload. Route handlers never build error responses by hand:
the handlers registered in `register_exception_handlers` turn any raised
error into the `{message, meta}` envelope.

Usage:
    from app.core.exceptions import BadRequestError, ResourceNotFoundError

    if not student.project_id:
        raise BadRequestError("This student is not part of a project, and hence has no deadlines!")

    if not deadline:
        raise ResourceNotFoundError("Deadline", deadline_id)
"""

import re
from typing import Optional, Any, Dict, List

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.core.logging_config import logger


class CapstoneHubError(Exception):
    """Base exception for all Capstone Hub errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        meta: Any = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.meta = meta
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "meta": self.meta
        }


# ============================================
# Client Errors (400-type)
# ============================================

class BadRequestError(CapstoneHubError):
    """A precondition of the operation does not hold"""

    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(BadRequestError):
    """Input passed schema checks but is semantically invalid"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, meta={"field": field} if field else None)
        self.field = field


class ConflictError(BadRequestError):
    """A unique constraint rejected the write"""

    def __init__(self, fields: List[str]):
        label = ", ".join(fields) if fields else "unique field"
        super().__init__(
            f"A record with the same {label} already exists",
            meta={"fields": fields}
        )


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(CapstoneHubError):
    """Missing, malformed or expired credentials"""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class AuthorizationError(CapstoneHubError):
    """Caller lacks the role or ownership required for the resource"""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "You do not have permission to access this resource"):
        super().__init__(message)


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(CapstoneHubError):
    """Entity looked up by id does not exist"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            meta={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Response helpers
# ============================================

_UNIQUE_FIELDS_PATTERNS = (
    # SQLite: UNIQUE constraint failed: users.email, users.name
    re.compile(r"UNIQUE constraint failed: ([\w., ]+)"),
    # PostgreSQL: Key (email)=(x@y.z) already exists.
    re.compile(r"Key \(([^)]+)\)="),
)


def conflicting_fields(exc: IntegrityError) -> List[str]:
    """Best-effort extraction of the column names named by a unique violation"""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in _UNIQUE_FIELDS_PATTERNS:
        match = pattern.search(text)
        if match:
            return [part.strip().split(".")[-1] for part in match.group(1).split(",")]
    return []


def error_response(error: CapstoneHubError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers that render every failure as `{message, meta}`"""

    @app.exception_handler(CapstoneHubError)
    async def capstone_hub_error_handler(request: Request, exc: CapstoneHubError):
        if exc.status_code >= 500:
            logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        meta = [
            {
                "location": ".".join(str(part) for part in err.get("loc", ())),
                "message": err.get("msg"),
                "type": err.get("type"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Request arguments failed validation checks", "meta": meta}
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail), "meta": None},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        return error_response(ConflictError(conflicting_fields(exc)))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(exc), "meta": None}
        )
