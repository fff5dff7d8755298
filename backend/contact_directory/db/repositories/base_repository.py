"""
Base repository class with common CRUD operations.
Repositories only flush; committing is left to the calling service so that
several repository writes can share one transaction.
"""

from typing import Generic, TypeVar, Type, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete

from contact_directory.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository keyed by a UUID ``id`` column."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Args:
            model: SQLAlchemy model class
            session: Async database session owned by the service
        """
        self.model = model
        self.session = session

    async def create(self, **kwargs) -> ModelType:
        """Insert a row and return it with server defaults loaded."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get(self, id: UUID) -> Optional[ModelType]:
        """Get a row by ID, or None."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """
        Update columns of one row.

        Returns:
            The refreshed instance, or None if the row does not exist
        """
        await self.session.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        instance = await self.get(id)
        if instance is not None:
            await self.session.refresh(instance)
        return instance

    async def delete(self, id: UUID) -> bool:
        """
        Delete one row.

        Returns:
            True if deleted, False if not found
        """
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        await self.session.flush()
        return result.rowcount > 0
