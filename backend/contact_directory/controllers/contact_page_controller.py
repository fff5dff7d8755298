"""
Contact page controller.
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.controllers.base_controller import BaseController
from contact_directory.services.contact_page_service import ContactPageService
from contact_directory.schemas.contact_page import (
    ContactPageCreate,
    ContactPageUpdate,
    ContactPageResponse,
    ContactPageListResponse,
    PublicContactPageResponse,
)


class ContactPageController(BaseController):
    """Controller for contact page operations."""

    def __init__(self, session: AsyncSession):
        self.page_service = ContactPageService(session)

    async def create_page(self, page_data: ContactPageCreate) -> ContactPageResponse:
        """Create a new contact page."""
        return await self.page_service.create_page(page_data)

    async def get_page(self, page_id: UUID) -> Optional[ContactPageResponse]:
        """Get contact page by ID."""
        return await self.page_service.get_page(page_id)

    async def list_pages(self, skip: int = 0, limit: int = 100) -> ContactPageListResponse:
        """List contact pages."""
        pages, total = await self.page_service.list_pages(skip=skip, limit=limit)
        return ContactPageListResponse(items=pages, total=total)

    async def update_page(self, page_id: UUID, page_data: ContactPageUpdate) -> Optional[ContactPageResponse]:
        """Update a contact page."""
        return await self.page_service.update_page(page_id, page_data)

    async def delete_page(self, page_id: UUID) -> bool:
        """Delete a contact page."""
        return await self.page_service.delete_page(page_id)

    async def toggle_publish(self, page_id: UUID) -> ContactPageResponse:
        """Publish or unpublish a contact page."""
        return await self.page_service.toggle_publish(page_id)

    async def get_public_page(self, area_code: str) -> PublicContactPageResponse:
        """Get the published page for an area code."""
        return await self.page_service.get_public_page(area_code)
