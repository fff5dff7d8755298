"""
Application error taxonomy and global exception handlers.
Serializes exceptions into structured logs and a uniform JSON error body.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from typing import Any, Dict, List, Optional

from contact_directory.core.integrations.observability import record_exception


logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Malformed input rejected at the boundary."""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidRoleError(ValidationError):
    """Role string outside the external vocabulary."""

    def __init__(self, value: Any, allowed: List[str]):
        super().__init__(
            f"Invalid role. Allowed values: {', '.join(allowed)}",
            details={"role": value, "allowed": allowed},
        )
        self.value = value


class NotFoundError(AppException):
    """Referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppException):
    """Uniqueness violation."""
    status_code = status.HTTP_409_CONFLICT


class UnmappableRoleError(AppException):
    """A stored role value has no external mapping. Indicates corrupt data, not bad input."""

    def __init__(self, value: Any):
        super().__init__(
            f"Stored role {value!r} has no external mapping",
            details={"role": value},
        )
        self.value = value


class ReferentialIntegrityError(AppException):
    """A junction row points at a row that no longer exists."""


class PartialFailureError(AppException):
    """Some pairs of a batch reorder failed while others were applied."""
    status_code = status.HTTP_207_MULTI_STATUS

    def __init__(self, message: str, failures: List[Dict[str, Any]]):
        super().__init__(message, details={"success": False, "failures": failures})
        self.failures = failures

    @property
    def failed_ids(self) -> List[str]:
        return [str(failure["member_id"]) for failure in self.failures]


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    if exc.status_code >= 500:
        record_exception(exc, request)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.message,
                "details": exc.details,
                "path": request.url.path,
            }
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.detail,
                "status_code": exc.status_code,
                "path": request.url.path,
            }
        },
        headers=getattr(exc, "headers", None),
    )


def _serialize_validation_errors(errors: list) -> list:
    """Convert validation errors to JSON-serializable format."""
    serialized = []
    for error in errors:
        serialized_error = {}
        for key, value in error.items():
            if key == "ctx" and isinstance(value, dict):
                # ctx may carry the raised ValueError itself
                serialized_error[key] = {
                    ctx_key: str(ctx_value) if isinstance(ctx_value, Exception) else ctx_value
                    for ctx_key, ctx_value in value.items()
                }
            elif isinstance(value, Exception):
                serialized_error[key] = str(value)
            else:
                serialized_error[key] = value
        serialized.append(serialized_error)
    return serialized


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors."""
    serialized_errors = _serialize_validation_errors(exc.errors())

    logger.warning(
        f"Validation error: {serialized_errors}",
        extra={
            "path": request.url.path,
            "errors": serialized_errors,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "message": "Validation error",
                "details": serialized_errors,
                "path": request.url.path,
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "exception_type": type(exc).__name__,
        },
    )

    record_exception(exc, request)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "message": "Internal server error",
                "path": request.url.path,
            }
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
