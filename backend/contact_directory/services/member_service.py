"""
Member service.
Owns the ordered roster of a contact page: uniqueness of contacts per page,
append-on-add, partial updates, atomic removal and batch reordering.
"""

from typing import List, Sequence
from uuid import UUID
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.core import roles
from contact_directory.core.exceptions import (
    ConflictError,
    NotFoundError,
    PartialFailureError,
    ValidationError,
)
from contact_directory.core.logging import get_logger
from contact_directory.db.repositories.contact_page_repository import ContactPageRepository
from contact_directory.db.repositories.contact_repository import ContactRepository
from contact_directory.db.repositories.member_repository import MemberRepository
from contact_directory.db.repositories.reason_repository import ReasonRepository
from contact_directory.models.member import ContactPageMember
from contact_directory.models.reason import ContactReason
from contact_directory.schemas.contact import AvailableContactResponse
from contact_directory.schemas.member import MemberCreate, MemberUpdate, MemberResponse, ReorderItem
from contact_directory.schemas.reason import ReasonRef
from contact_directory.services.base_service import BaseService
from contact_directory.services.reason_service import ReasonService

logger = get_logger(__name__)


class MemberService(BaseService):
    """Service for roster operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.page_repo = ContactPageRepository(session)
        self.contact_repo = ContactRepository(session)
        self.member_repo = MemberRepository(session)
        self.reason_repo = ReasonRepository(session)
        self.reason_service = ReasonService(session)

    async def get_roster(self, page_id: UUID) -> List[MemberResponse]:
        """Members of a page in display order, with contact fields and reasons."""
        await self._require_page(page_id)
        return await self.list_roster(page_id)

    async def list_roster(self, page_id: UUID) -> List[MemberResponse]:
        """Roster read for a page already known to exist."""
        members = await self.member_repo.list_by_page(page_id)
        reasons = await self.reason_repo.reasons_by_member([member.id for member in members])
        return [self._to_response(member, reasons[member.id]) for member in members]

    async def list_available_contacts(self, page_id: UUID) -> List[AvailableContactResponse]:
        """Active contacts not yet on the page."""
        await self._require_page(page_id)
        contacts = await self.contact_repo.list_available_for_page(page_id)
        return [AvailableContactResponse.model_validate(contact) for contact in contacts]

    async def add_member(self, page_id: UUID, member_data: MemberCreate) -> MemberResponse:
        """
        Place a contact on a page.

        Without an explicit ``order_index`` the member is appended after the
        current roster.

        Raises:
            InvalidRoleError: if the role is not in the external vocabulary
            NotFoundError: if the page or the contact does not exist
            ConflictError: if the contact is already on the page
        """
        canonical = roles.decode(member_data.role)
        await self._require_page(page_id)

        contact = await self.contact_repo.get(member_data.contact_id)
        if not contact:
            raise NotFoundError("Contact not found", details={"contact_id": str(member_data.contact_id)})

        if await self.member_repo.get_by_page_and_contact(page_id, member_data.contact_id):
            raise self._duplicate(page_id, member_data.contact_id)

        order_index = member_data.order_index
        if order_index is None:
            order_index = await self.member_repo.count_by_page(page_id)

        try:
            member = await self.member_repo.create(
                page_id=page_id,
                contact_id=member_data.contact_id,
                role=canonical.value,
                order_index=order_index,
            )
            await self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent add of the same contact
            await self.session.rollback()
            raise self._duplicate(page_id, member_data.contact_id) from None

        member = await self.member_repo.get(member.id)
        logger.info(
            "Member added",
            extra={"page_id": str(page_id), "member_id": str(member.id), "order_index": order_index},
        )
        return self._to_response(member, [])

    async def update_member(self, member_id: UUID, member_data: MemberUpdate) -> MemberResponse:
        """
        Partially update a member.

        Omitted fields are left unchanged. ``reason_ids`` replaces the whole
        reason set. Order contiguity is not enforced here; see ``reorder``.
        """
        update_dict = member_data.model_dump(exclude_unset=True)
        reason_ids = update_dict.pop("reason_ids", None)

        values = {}
        if "role" in update_dict:
            values["role"] = roles.decode(update_dict["role"]).value
        if update_dict.get("order_index") is not None:
            values["order_index"] = update_dict["order_index"]

        if not values and reason_ids is None:
            raise ValidationError("No valid fields to update")

        member = await self.member_repo.get(member_id)
        if not member:
            raise NotFoundError("Member not found", details={"member_id": str(member_id)})

        try:
            if values:
                await self.member_repo.update(member_id, **values)
            if reason_ids is not None:
                await self.reason_service.apply_member_reasons(member_id, reason_ids)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        member = await self.member_repo.get(member_id)
        reasons = await self.reason_repo.reasons_by_member([member_id])
        logger.info(
            "Member updated",
            extra={"member_id": str(member_id), "fields": sorted(values) + (["reason_ids"] if reason_ids is not None else [])},
        )
        return self._to_response(member, reasons[member_id])

    async def remove_member(self, member_id: UUID) -> None:
        """
        Delete a member and its reason assignments as one unit.

        Remaining members keep their ``order_index``; the gap is closed by the
        next reorder.
        """
        member = await self.member_repo.get(member_id)
        if not member:
            raise NotFoundError("Member not found", details={"member_id": str(member_id)})

        try:
            await self.reason_repo.detach_members([member_id])
            await self.member_repo.delete(member_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Member removed", extra={"member_id": str(member_id), "page_id": str(member.page_id)})

    async def reorder(self, page_id: UUID, order: Sequence[ReorderItem]) -> None:
        """
        Write every (member, position) pair of a batch.

        Each pair is committed on its own. A failing pair does not undo the
        ones already written; all failures are collected and reported
        together so the caller can re-fetch the roster. The caller supplies
        the permutation; nothing is renumbered here.

        Raises:
            ValidationError: if a member appears twice in the batch
            PartialFailureError: if any pair could not be written
        """
        await self._require_page(page_id)

        member_ids = [item.member_id for item in order]
        duplicates = sorted({str(member_id) for member_id in member_ids if member_ids.count(member_id) > 1})
        if duplicates:
            raise ValidationError(
                "Each member may appear only once in a reorder batch",
                details={"member_ids": duplicates},
            )

        failures = []
        for item in order:
            try:
                applied = await self.member_repo.set_order_index(item.member_id, page_id, item.order_index)
                if applied:
                    await self.session.commit()
                else:
                    failures.append({"member_id": str(item.member_id), "reason": "Member not found on this page"})
            except SQLAlchemyError as exc:
                await self.session.rollback()
                failures.append({"member_id": str(item.member_id), "reason": str(exc)})

        if failures:
            logger.warning(
                "Reorder partially failed",
                extra={"page_id": str(page_id), "failed": len(failures), "total": len(order)},
            )
            raise PartialFailureError(
                f"{len(failures)} of {len(order)} reorder updates failed",
                failures=failures,
            )

        logger.info("Roster reordered", extra={"page_id": str(page_id), "total": len(order)})

    async def _require_page(self, page_id: UUID) -> None:
        if not await self.page_repo.get(page_id):
            raise NotFoundError("Contact page not found", details={"page_id": str(page_id)})

    def _duplicate(self, page_id: UUID, contact_id: UUID) -> ConflictError:
        logger.warning("Duplicate member rejected", extra={"page_id": str(page_id), "contact_id": str(contact_id)})
        return ConflictError(
            "Contact already added",
            details={"page_id": str(page_id), "contact_id": str(contact_id)},
        )

    def _to_response(self, member: ContactPageMember, reasons: List[ContactReason]) -> MemberResponse:
        """Convert member model to response schema."""
        contact = member.contact
        return MemberResponse(
            id=member.id,
            page_id=member.page_id,
            contact_id=member.contact_id,
            name=contact.name if contact else None,
            title=contact.title if contact else None,
            email=contact.email if contact else None,
            phone=contact.phone if contact else None,
            photo_url=contact.photo_url if contact else None,
            role=roles.encode(member.role),
            order_index=member.order_index,
            reasons=[ReasonRef.model_validate(reason) for reason in reasons],
        )
