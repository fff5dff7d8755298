"""
Contact repository for database operations.
"""

from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from contact_directory.db.repositories.base_repository import BaseRepository
from contact_directory.models.contact import Contact
from contact_directory.models.member import ContactPageMember


class ContactRepository(BaseRepository[Contact]):
    """Repository for contact lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(Contact, session)

    async def list_available_for_page(self, page_id: UUID) -> List[Contact]:
        """List active contacts not yet placed on the page, ordered by name."""
        on_page = select(ContactPageMember.contact_id).where(ContactPageMember.page_id == page_id)
        result = await self.session.execute(
            select(Contact)
            .where(Contact.is_active.is_(True))
            .where(Contact.id.not_in(on_page))
            .order_by(Contact.name, Contact.id)
        )
        return list(result.scalars().all())
