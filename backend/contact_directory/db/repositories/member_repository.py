"""
Contact page member repository for database operations.
"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import selectinload

from contact_directory.db.repositories.base_repository import BaseRepository
from contact_directory.models.member import ContactPageMember


class MemberRepository(BaseRepository[ContactPageMember]):
    """Repository for roster operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ContactPageMember, session)

    async def get(self, id: UUID) -> Optional[ContactPageMember]:
        """Get member by ID with contact relationship loaded."""
        result = await self.session.execute(
            select(ContactPageMember)
            .options(selectinload(ContactPageMember.contact))
            .execution_options(populate_existing=True)
            .where(ContactPageMember.id == id)
        )
        return result.scalar_one_or_none()

    async def list_by_page(self, page_id: UUID) -> List[ContactPageMember]:
        """
        List the roster of a page in display order.

        Ties on ``order_index`` (possible after a partially failed reorder)
        fall back to creation time and then id so reads stay deterministic.
        """
        result = await self.session.execute(
            select(ContactPageMember)
            .options(selectinload(ContactPageMember.contact))
            .execution_options(populate_existing=True)
            .where(ContactPageMember.page_id == page_id)
            .order_by(
                ContactPageMember.order_index,
                ContactPageMember.created_at,
                ContactPageMember.id,
            )
        )
        return list(result.scalars().all())

    async def count_by_page(self, page_id: UUID) -> int:
        """Count members on a page."""
        result = await self.session.execute(
            select(func.count(ContactPageMember.id)).where(ContactPageMember.page_id == page_id)
        )
        return result.scalar() or 0

    async def get_by_page_and_contact(self, page_id: UUID, contact_id: UUID) -> Optional[ContactPageMember]:
        """Get the member entry for a contact on a page, if any."""
        result = await self.session.execute(
            select(ContactPageMember)
            .where(ContactPageMember.page_id == page_id)
            .where(ContactPageMember.contact_id == contact_id)
        )
        return result.scalar_one_or_none()

    async def list_ids_by_page(self, page_id: UUID) -> List[UUID]:
        """Ids of every member on a page."""
        result = await self.session.execute(
            select(ContactPageMember.id).where(ContactPageMember.page_id == page_id)
        )
        return list(result.scalars().all())

    async def set_order_index(self, member_id: UUID, page_id: UUID, order_index: int) -> bool:
        """
        Write one member's position.

        Returns:
            False if the member does not exist on ``page_id``
        """
        result = await self.session.execute(
            update(ContactPageMember)
            .where(ContactPageMember.id == member_id)
            .where(ContactPageMember.page_id == page_id)
            .values(order_index=order_index)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount > 0

    async def delete_by_page(self, page_id: UUID) -> int:
        """Delete every member of a page."""
        result = await self.session.execute(
            delete(ContactPageMember).where(ContactPageMember.page_id == page_id)
        )
        await self.session.flush()
        return result.rowcount
