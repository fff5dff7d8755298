"""
Contact page member controller.
"""

from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.controllers.base_controller import BaseController
from contact_directory.services.member_service import MemberService
from contact_directory.services.reason_service import ReasonService
from contact_directory.schemas.contact import AvailableContactListResponse
from contact_directory.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberResponse,
    RosterResponse,
    ReorderRequest,
    ReorderResponse,
)
from contact_directory.schemas.reason import ReasonRef


class MemberController(BaseController):
    """Controller for roster operations."""

    def __init__(self, session: AsyncSession):
        self.member_service = MemberService(session)
        self.reason_service = ReasonService(session)

    async def get_roster(self, page_id: UUID) -> RosterResponse:
        """Ordered roster of a page."""
        members = await self.member_service.get_roster(page_id)
        return RosterResponse(items=members, total=len(members))

    async def list_available_contacts(self, page_id: UUID) -> AvailableContactListResponse:
        """Contacts that can still be added to a page."""
        contacts = await self.member_service.list_available_contacts(page_id)
        return AvailableContactListResponse(items=contacts, total=len(contacts))

    async def add_member(self, page_id: UUID, member_data: MemberCreate) -> MemberResponse:
        """Add a contact to a page."""
        return await self.member_service.add_member(page_id, member_data)

    async def update_member(self, member_id: UUID, member_data: MemberUpdate) -> MemberResponse:
        """Update a member."""
        return await self.member_service.update_member(member_id, member_data)

    async def remove_member(self, member_id: UUID) -> None:
        """Remove a member from its page."""
        await self.member_service.remove_member(member_id)

    async def reorder(self, page_id: UUID, reorder_data: ReorderRequest) -> ReorderResponse:
        """Apply a reorder batch."""
        await self.member_service.reorder(page_id, reorder_data.order)
        return ReorderResponse(success=True)

    async def replace_member_reasons(self, member_id: UUID, reason_ids: List[UUID]) -> List[ReasonRef]:
        """Replace the reason set of a member."""
        return await self.reason_service.replace_member_reasons(member_id, reason_ids)
