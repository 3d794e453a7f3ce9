"""
Error handling configuration

Custom exception classes and exception handlers for FastAPI.

Business rejections (``RequestRejected``) are expected outcomes and are
returned with ``success: false`` plus a reason code. Internal faults are
logged with full detail and answered with a generic message only.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from harmony.core.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base exception class for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(AppError):
    """Authentication failed"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="AUTHENTICATION_FAILED",
            details=details,
        )


# ============ Business rejections ============

class RequestRejected(AppError):
    """A precondition of a request operation failed"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "REJECTED"
    default_message = "Request rejected"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            message=message or self.default_message,
            status_code=type(self).status_code,
            code=type(self).code,
            details=details,
        )


class TargetNotFound(RequestRejected):
    status_code = status.HTTP_404_NOT_FOUND
    code = "TARGET_NOT_FOUND"
    default_message = "Target user not found"


class InvalidTarget(RequestRejected):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_TARGET"
    default_message = "You cannot send a request to yourself"


class TeamNotFound(RequestRejected):
    status_code = status.HTTP_404_NOT_FOUND
    code = "TEAM_NOT_FOUND"
    default_message = "Team not found"


class AlreadyInvited(RequestRejected):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_INVITED"
    default_message = "User already invited to team"


class AlreadyMember(RequestRejected):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_MEMBER"
    default_message = "User is already in the team"


class AlreadyResolved(RequestRejected):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_RESOLVED"
    default_message = "Request has already been resolved"


class RequestNotFound(RequestRejected):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Request not found"


class PermissionDenied(RequestRejected):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"
    default_message = "Permission denied"


# ============ Internal faults ============

class AllocationExhausted(AppError):
    """Request uid allocation kept colliding"""

    def __init__(self, attempts: int):
        super().__init__(
            message=f"Could not allocate a unique request uid after {attempts} attempts",
            code="ALLOCATION_EXHAUSTED",
            details={"attempts": attempts},
        )


class PersistenceFailure(AppError):
    """The store is unavailable or rejected a statement"""

    def __init__(self, message: str = "Persistence failure", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="PERSISTENCE_FAILURE",
            details=details,
        )


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle custom application exceptions"""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            f"App error: {exc.message}",
            error_code=exc.code,
            status_code=exc.status_code,
            details=exc.details,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": GENERIC_ERROR_MESSAGE,
                },
            },
        )

    logger.warning(
        "request.rejected",
        error_code=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "reason": exc.code,
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
            },
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle standard FastAPI HTTP exceptions"""
    logger.warning(
        f"HTTP error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": "HTTP_ERROR",
                "message": str(exc.detail),
            },
        },
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    errors = exc.errors()
    logger.warning(
        "Validation error",
        error_count=len(errors),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(errors)},
            },
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions"""
    logger.exception(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": GENERIC_ERROR_MESSAGE,
            },
        },
    )
