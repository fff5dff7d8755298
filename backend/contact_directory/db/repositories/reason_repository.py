"""
Contact reason repository.
Covers the global catalog and the member/reason junction.
"""

from typing import Optional, List, Dict, Iterable, Set
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, insert

from contact_directory.core.exceptions import ReferentialIntegrityError
from contact_directory.db.repositories.base_repository import BaseRepository
from contact_directory.models.association_tables import member_reasons
from contact_directory.models.reason import ContactReason


class ReasonRepository(BaseRepository[ContactReason]):
    """Repository for reason catalog and assignment operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ContactReason, session)

    async def list_catalog(self) -> List[ContactReason]:
        """All reasons in creation order."""
        result = await self.session.execute(
            select(ContactReason).order_by(ContactReason.created_at, ContactReason.id)
        )
        return list(result.scalars().all())

    async def get_by_label(self, label: str, exclude_id: Optional[UUID] = None) -> Optional[ContactReason]:
        """Find a reason by exact label."""
        query = select(ContactReason).where(ContactReason.label == label)
        if exclude_id is not None:
            query = query.where(ContactReason.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def existing_ids(self, reason_ids: Iterable[UUID]) -> Set[UUID]:
        """
        Subset of ``reason_ids`` present in the catalog.
        Rows are locked so a concurrent delete cannot slip in before the junction write.
        """
        ids = list(reason_ids)
        if not ids:
            return set()
        result = await self.session.execute(
            select(ContactReason.id).where(ContactReason.id.in_(ids)).with_for_update()
        )
        return set(result.scalars().all())

    async def assigned_ids(self, member_id: UUID) -> Set[UUID]:
        """Reason ids currently attached to a member."""
        result = await self.session.execute(
            select(member_reasons.c.reason_id).where(member_reasons.c.member_id == member_id)
        )
        return set(result.scalars().all())

    async def attach(self, member_id: UUID, reason_ids: Iterable[UUID]) -> None:
        """Insert junction rows."""
        rows = [{"member_id": member_id, "reason_id": reason_id} for reason_id in reason_ids]
        if rows:
            await self.session.execute(insert(member_reasons), rows)
            await self.session.flush()

    async def detach(self, member_id: UUID, reason_ids: Iterable[UUID]) -> None:
        """Delete specific junction rows of one member."""
        ids = list(reason_ids)
        if ids:
            await self.session.execute(
                delete(member_reasons)
                .where(member_reasons.c.member_id == member_id)
                .where(member_reasons.c.reason_id.in_(ids))
            )
            await self.session.flush()

    async def detach_members(self, member_ids: Iterable[UUID]) -> int:
        """Delete every junction row of the given members."""
        ids = list(member_ids)
        if not ids:
            return 0
        result = await self.session.execute(
            delete(member_reasons).where(member_reasons.c.member_id.in_(ids))
        )
        await self.session.flush()
        return result.rowcount

    async def detach_reason(self, reason_id: UUID) -> int:
        """Delete every junction row pointing at a reason."""
        result = await self.session.execute(
            delete(member_reasons).where(member_reasons.c.reason_id == reason_id)
        )
        await self.session.flush()
        return result.rowcount

    async def reasons_by_member(self, member_ids: Iterable[UUID]) -> Dict[UUID, List[ContactReason]]:
        """
        Group assigned reasons by member, each list ordered by label then id.

        Raises:
            ReferentialIntegrityError: if a junction row points at a missing reason
        """
        ids = list(member_ids)
        grouped: Dict[UUID, List[ContactReason]] = {member_id: [] for member_id in ids}
        if not ids:
            return grouped

        result = await self.session.execute(
            select(member_reasons.c.member_id, member_reasons.c.reason_id, ContactReason)
            .select_from(member_reasons)
            .outerjoin(ContactReason, ContactReason.id == member_reasons.c.reason_id)
            .where(member_reasons.c.member_id.in_(ids))
            .order_by(member_reasons.c.member_id, ContactReason.label, member_reasons.c.reason_id)
        )
        for member_id, reason_id, reason in result.all():
            if reason is None:
                raise ReferentialIntegrityError(
                    "Member references a reason that no longer exists",
                    details={"member_id": str(member_id), "reason_id": str(reason_id)},
                )
            grouped[member_id].append(reason)
        return grouped
