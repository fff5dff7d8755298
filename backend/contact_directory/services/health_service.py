"""
Health service.
Provides health check functionality.
"""

import time
from typing import Callable, Optional
from sqlalchemy.exc import SQLAlchemyError

from contact_directory.core.logging import get_logger
from contact_directory.db import session as db_session
from contact_directory.db.repositories.health_repository import HealthRepository
from contact_directory.schemas.health import HealthResponse
from contact_directory.services.base_service import BaseService

logger = get_logger(__name__)


class HealthService(BaseService):
    """Service for health check operations."""

    def __init__(self, session_factory: Optional[Callable] = None):
        self.start_time = time.time()
        self._session_factory = session_factory

    def _sessions(self) -> Callable:
        if self._session_factory is not None:
            return self._session_factory
        if db_session.async_session_maker is None:
            db_session.create_sessionmaker()
        return db_session.async_session_maker

    async def get_health(self) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        uptime_seconds = int(time.time() - self.start_time)
        uptime_str = f"PT{uptime_seconds}S"  # ISO 8601 duration format

        checks = {}

        try:
            async with self._sessions()() as session:
                repo = HealthRepository(session=session)
                checks["database"] = "ok" if await repo.check_database() else "error"
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database health check failed", extra={"error": str(e)})
            checks["database"] = f"error: {str(e)}"

        status = "ok" if all(check == "ok" for check in checks.values()) else "degraded"

        return HealthResponse(
            status=status,
            uptime=uptime_str,
            checks=checks,
        )
