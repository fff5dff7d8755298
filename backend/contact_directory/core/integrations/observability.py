"""
Observability hooks.
Exceptions surfaced by the API are recorded here so every error path
reports through one place.
"""

from typing import Optional
from fastapi import Request
import logging

from contact_directory.core.config import settings

logger = logging.getLogger(__name__)


def setup_observability() -> None:
    """Announce the service identity used when recording exceptions."""
    logger.info(
        "Setting up observability",
        extra={
            "service_name": settings.SERVICE_NAME,
            "environment": settings.ENVIRONMENT,
        },
    )


def record_exception(exc: Exception, request: Optional[Request] = None) -> None:
    """
    Record an exception in the observability backend.

    Args:
        exc: The exception that occurred
        request: The FastAPI request object, when the error came from a route
    """
    logger.error(
        f"Exception recorded: {type(exc).__name__}",
        extra={
            "exception_message": str(exc),
            "path": request.url.path if request is not None else None,
            "service_name": settings.SERVICE_NAME,
        },
    )
