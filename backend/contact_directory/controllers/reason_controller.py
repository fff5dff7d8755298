"""
Contact reason controller.
"""

from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.controllers.base_controller import BaseController
from contact_directory.services.reason_service import ReasonService
from contact_directory.schemas.reason import ReasonCreate, ReasonUpdate, ReasonResponse, ReasonListResponse


class ReasonController(BaseController):
    """Controller for reason catalog operations."""

    def __init__(self, session: AsyncSession):
        self.reason_service = ReasonService(session)

    async def list_reasons(self) -> ReasonListResponse:
        """List the reason catalog."""
        reasons = await self.reason_service.list_catalog()
        return ReasonListResponse(items=reasons, total=len(reasons))

    async def create_reason(self, reason_data: ReasonCreate) -> ReasonResponse:
        """Create a reason."""
        return await self.reason_service.create_reason(reason_data)

    async def update_reason(self, reason_id: UUID, reason_data: ReasonUpdate) -> ReasonResponse:
        """Update a reason."""
        return await self.reason_service.update_reason(reason_id, reason_data)

    async def delete_reason(self, reason_id: UUID) -> None:
        """Delete a reason."""
        await self.reason_service.delete_reason(reason_id)
