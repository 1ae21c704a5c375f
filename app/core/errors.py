"""
Application error taxonomy

Every error a client can observe is an ``AppError`` carrying an HTTP status and
a stable machine-readable code. The codes follow the callable-function error
codes the mobile clients already understand (``not-found``,
``failed-precondition``...).
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception class for application errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal"
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgumentError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid-argument"
    default_message = "Invalid argument"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not-found"
    default_message = "User not found"


class FailedPreconditionError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "failed-precondition"
    default_message = "Operation is not allowed in the current state"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission-denied"
    default_message = "Permission denied"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Authentication required"


class ResourceExhaustedError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "resource-exhausted"
    default_message = "Rate limit exceeded, please try again later"


class UnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "unavailable"
    default_message = "Service temporarily unavailable"


class InternalError(AppError):
    pass


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as ``{"error": {"code", "message"}}``."""
    if exc.status_code >= 500:
        logger.error(f"App error on {request.url.path}: {exc.code} {exc.message}")
    else:
        logger.info(f"App error on {request.url.path}: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
            }
        },
    )


def _field_name(loc) -> str:
    # loc looks like ("body", "fromUid") or ("query", "request_type")
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request body"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as ``invalid-argument``."""
    errors = exc.errors()
    logger.info(f"Validation error on {request.url.path}: {len(errors)} error(s)")
    if errors:
        message = f"Invalid or missing field: {_field_name(errors[0].get('loc', ()))}"
    else:
        message = None
    return await app_error_handler(request, InvalidArgumentError(message))
