"""
Reason service.
Owns the reason catalog and the full-replace semantics of member reason sets.
"""

from typing import Iterable, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.core.exceptions import ConflictError, NotFoundError, ValidationError
from contact_directory.core.logging import get_logger
from contact_directory.db.repositories.member_repository import MemberRepository
from contact_directory.db.repositories.reason_repository import ReasonRepository
from contact_directory.models.reason import ContactReason
from contact_directory.schemas.reason import ReasonCreate, ReasonUpdate, ReasonResponse, ReasonRef
from contact_directory.services.base_service import BaseService

logger = get_logger(__name__)


def _clean_label(label: Optional[str]) -> str:
    cleaned = label.strip() if isinstance(label, str) else ""
    if not cleaned:
        raise ValidationError("Label is required and must be a non-empty string")
    return cleaned


def _clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    return description.strip() or None


class ReasonService(BaseService):
    """Service for reason catalog and member reason assignments."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.reason_repo = ReasonRepository(session)
        self.member_repo = MemberRepository(session)

    async def list_catalog(self) -> List[ReasonResponse]:
        """All reasons, oldest first."""
        reasons = await self.reason_repo.list_catalog()
        return [ReasonResponse.model_validate(reason) for reason in reasons]

    async def create_reason(self, reason_data: ReasonCreate) -> ReasonResponse:
        """Add a reason to the catalog."""
        label = _clean_label(reason_data.label)
        if await self.reason_repo.get_by_label(label):
            raise ConflictError(
                "A contact reason with this label already exists",
                details={"label": label},
            )

        reason = await self.reason_repo.create(
            label=label,
            description=_clean_description(reason_data.description),
        )
        await self.session.commit()
        logger.info("Contact reason created", extra={"reason_id": str(reason.id)})
        return ReasonResponse.model_validate(reason)

    async def update_reason(self, reason_id: UUID, reason_data: ReasonUpdate) -> ReasonResponse:
        """Relabel or redescribe a reason."""
        update_dict = reason_data.model_dump(exclude_unset=True)
        if not update_dict:
            raise ValidationError("At least one field (label or description) must be provided")

        reason = await self.reason_repo.get(reason_id)
        if not reason:
            raise NotFoundError("Contact reason not found", details={"reason_id": str(reason_id)})

        values = {}
        if "label" in update_dict:
            values["label"] = _clean_label(update_dict["label"])
            if await self.reason_repo.get_by_label(values["label"], exclude_id=reason_id):
                raise ConflictError(
                    "A contact reason with this label already exists",
                    details={"label": values["label"]},
                )
        if "description" in update_dict:
            values["description"] = _clean_description(update_dict["description"])

        updated = await self.reason_repo.update(reason_id, **values)
        await self.session.commit()
        return ReasonResponse.model_validate(updated)

    async def delete_reason(self, reason_id: UUID) -> None:
        """
        Remove a reason from the catalog together with every assignment of it.
        Both deletes commit or roll back together, so no junction row can be left dangling.
        """
        reason = await self.reason_repo.get(reason_id)
        if not reason:
            raise NotFoundError("Contact reason not found", details={"reason_id": str(reason_id)})

        try:
            detached = await self.reason_repo.detach_reason(reason_id)
            await self.reason_repo.delete(reason_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Contact reason deleted",
            extra={"reason_id": str(reason_id), "detached_assignments": detached},
        )

    async def apply_member_reasons(self, member_id: UUID, reason_ids: Iterable[UUID]) -> List[ContactReason]:
        """
        Make ``reason_ids`` the member's exact reason set without committing.

        Only the difference against the current set is written. The caller
        owns the transaction so the change can be combined with other edits.

        Raises:
            NotFoundError: if the member or any of the reasons does not exist
        """
        member = await self.member_repo.get(member_id)
        if not member:
            raise NotFoundError("Member not found", details={"member_id": str(member_id)})

        wanted = set(reason_ids)
        existing = await self.reason_repo.existing_ids(wanted)
        missing = wanted - existing
        if missing:
            raise NotFoundError(
                "Contact reason not found",
                details={"reason_ids": sorted(str(reason_id) for reason_id in missing)},
            )

        current = await self.reason_repo.assigned_ids(member_id)
        await self.reason_repo.detach(member_id, sorted(current - wanted, key=str))
        await self.reason_repo.attach(member_id, sorted(wanted - current, key=str))

        reasons = await self.reason_repo.reasons_by_member([member_id])
        return reasons[member_id]

    async def replace_member_reasons(self, member_id: UUID, reason_ids: Iterable[UUID]) -> List[ReasonRef]:
        """
        Replace a member's reason set as one transaction.
        On any failure the member keeps exactly the set it had before.
        """
        try:
            reasons = await self.apply_member_reasons(member_id, reason_ids)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Member reasons replaced",
            extra={"member_id": str(member_id), "reason_count": len(reasons)},
        )
        return [ReasonRef.model_validate(reason) for reason in reasons]
