"""
Contact page repository for database operations.
"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from contact_directory.db.repositories.base_repository import BaseRepository
from contact_directory.models.contact_page import ContactPage


class ContactPageRepository(BaseRepository[ContactPage]):
    """Repository for contact page operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ContactPage, session)

    async def list_newest_first(self, skip: int = 0, limit: int = 100) -> List[ContactPage]:
        """List pages, most recently created first."""
        result = await self.session.execute(
            select(ContactPage)
            .order_by(ContactPage.created_at.desc(), ContactPage.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_all(self) -> int:
        """Count all pages."""
        result = await self.session.execute(select(func.count(ContactPage.id)))
        return result.scalar() or 0

    async def get_by_area_code(self, area_code: str) -> Optional[ContactPage]:
        """Get a page by its area code, published or not."""
        result = await self.session.execute(
            select(ContactPage).where(ContactPage.area_code == area_code)
        )
        return result.scalar_one_or_none()

    async def get_published_by_area_code(self, area_code: str) -> Optional[ContactPage]:
        """Get a published page by its area code."""
        result = await self.session.execute(
            select(ContactPage)
            .where(ContactPage.area_code == area_code)
            .where(ContactPage.is_published.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, id: UUID) -> Optional[ContactPage]:
        """Get a page and lock its row for the rest of the transaction."""
        result = await self.session.execute(
            select(ContactPage).where(ContactPage.id == id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def find_published_with_slug(self, slug: str, exclude_id: UUID) -> List[ContactPage]:
        """Other published pages that already use ``slug``."""
        result = await self.session.execute(
            select(ContactPage)
            .where(ContactPage.slug == slug)
            .where(ContactPage.is_published.is_(True))
            .where(ContactPage.id != exclude_id)
        )
        return list(result.scalars().all())
