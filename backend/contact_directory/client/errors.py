"""
Client-side view of the error taxonomy.
"""

from typing import Any

from contact_directory.core.exceptions import (
    AppException,
    ConflictError,
    InvalidRoleError,
    NotFoundError,
    PartialFailureError,
    ValidationError,
)


class MutationInvalidatedError(AppException):
    """
    An optimistic mutation settled after an earlier mutation on the same
    cache key rolled back, so the state it was built on no longer exists.
    The server may or may not have applied it; the cache has been refreshed
    from the server where possible and the caller should retry or re-read.
    """
    status_code = 409


def error_from_response(status: int, payload: Any) -> AppException:
    """Rebuild the service's exception from an error response body."""
    error = payload.get("error") if isinstance(payload, dict) else None
    error = error if isinstance(error, dict) else {}
    message = error.get("message") or f"Request failed with status {status}"
    details = error.get("details")

    if status == 207:
        failures = details.get("failures", []) if isinstance(details, dict) else []
        return PartialFailureError(message, failures=failures)
    if status == 400:
        if isinstance(details, dict) and "allowed" in details:
            return InvalidRoleError(details.get("role"), details["allowed"])
        return ValidationError(message, details=details)
    if status == 404:
        return NotFoundError(message, details=details)
    if status == 409:
        return ConflictError(message, details=details)
    if status == 422:
        return ValidationError(message, status_code=422, details=details)
    return AppException(message, status_code=status, details=details)
