"""
Contact page service.
Page field CRUD, the published-slug invariant and the public page read.
"""

import re
from typing import List, Optional
from uuid import UUID
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.core.config import settings
from contact_directory.core.exceptions import ConflictError, NotFoundError, ValidationError
from contact_directory.core.logging import get_logger
from contact_directory.db.repositories.contact_page_repository import ContactPageRepository
from contact_directory.db.repositories.member_repository import MemberRepository
from contact_directory.db.repositories.reason_repository import ReasonRepository
from contact_directory.schemas.contact_page import (
    ContactPageCreate,
    ContactPageUpdate,
    ContactPageResponse,
    PublicContactPageResponse,
    PublicMemberResponse,
)
from contact_directory.services.base_service import BaseService
from contact_directory.services.member_service import MemberService

logger = get_logger(__name__)

AREA_CODE_PATTERN = re.compile(r"^\d{4,5}$")


def generate_slug(customer_name: str, area_code: str) -> str:
    """``"Acme Corp."`` + ``"1234"`` -> ``"acme-corp-1234"``."""
    clean_name = re.sub(r"[^a-z0-9]+", "-", customer_name.lower()).strip("-")
    return f"{clean_name}-{area_code}"


class ContactPageService(BaseService):
    """Service for contact page operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.page_repo = ContactPageRepository(session)
        self.member_repo = MemberRepository(session)
        self.reason_repo = ReasonRepository(session)
        self.member_service = MemberService(session)

    async def create_page(self, page_data: ContactPageCreate) -> ContactPageResponse:
        """
        Create an unpublished page.

        The slug is derived here once and never recomputed, even if the
        customer name changes later.
        """
        customer_name = page_data.customer_name.strip()
        if not customer_name:
            raise ValidationError("customer_name and area_code are required")
        if not AREA_CODE_PATTERN.match(page_data.area_code):
            raise ValidationError(
                "area_code must be 4-5 digits",
                details={"area_code": page_data.area_code},
            )
        if await self.page_repo.get_by_area_code(page_data.area_code):
            raise ConflictError("area_code must be unique", details={"area_code": page_data.area_code})

        try:
            page = await self.page_repo.create(
                customer_name=customer_name,
                area_code=page_data.area_code,
                slug=generate_slug(customer_name, page_data.area_code),
                brand_color=page_data.brand_color or None,
                intro_text=page_data.intro_text or None,
                logo_url=page_data.logo_url or None,
                is_published=False,
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("area_code must be unique", details={"area_code": page_data.area_code}) from None

        logger.info("Contact page created", extra={"page_id": str(page.id), "slug": page.slug})
        return ContactPageResponse.model_validate(page)

    async def get_page(self, page_id: UUID) -> Optional[ContactPageResponse]:
        """Get page by ID."""
        page = await self.page_repo.get(page_id)
        if not page:
            return None
        return ContactPageResponse.model_validate(page)

    async def list_pages(self, skip: int = 0, limit: int = 100) -> tuple[List[ContactPageResponse], int]:
        """List pages, newest first."""
        pages = await self.page_repo.list_newest_first(skip, limit)
        total = await self.page_repo.count_all()
        return [ContactPageResponse.model_validate(page) for page in pages], total

    async def update_page(self, page_id: UUID, page_data: ContactPageUpdate) -> Optional[ContactPageResponse]:
        """Update editable page fields."""
        update_dict = page_data.model_dump(exclude_unset=True)
        if update_dict.get("customer_name", "") is None:
            del update_dict["customer_name"]
        if not update_dict:
            raise ValidationError("No fields to update")

        page = await self.page_repo.get(page_id)
        if not page:
            return None

        updated = await self.page_repo.update(page_id, **update_dict)
        await self.session.commit()
        logger.info("Contact page updated", extra={"page_id": str(page_id), "fields": sorted(update_dict)})
        return ContactPageResponse.model_validate(updated)

    async def delete_page(self, page_id: UUID) -> bool:
        """
        Delete a page with its members and their reason assignments.
        All three deletes commit together.
        """
        page = await self.page_repo.get(page_id)
        if not page:
            return False

        try:
            member_ids = await self.member_repo.list_ids_by_page(page_id)
            await self.reason_repo.detach_members(member_ids)
            await self.member_repo.delete_by_page(page_id)
            await self.page_repo.delete(page_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Contact page deleted", extra={"page_id": str(page_id), "members": len(member_ids)})
        return True

    async def toggle_publish(self, page_id: UUID) -> ContactPageResponse:
        """
        Flip ``is_published``.

        Publishing is refused while another published page holds the same
        slug. The partial unique index on published slugs backs the check, so
        two concurrent toggles on colliding slugs cannot both succeed.
        Unpublishing always succeeds.

        Raises:
            NotFoundError: if the page does not exist
            ConflictError: if the slug is taken by another published page
        """
        page = await self.page_repo.get_for_update(page_id)
        if not page:
            raise NotFoundError("Contact page not found", details={"page_id": str(page_id)})

        publish = not page.is_published
        if publish:
            conflicting = await self.page_repo.find_published_with_slug(page.slug, page.id)
            if conflicting:
                raise self._slug_taken(page.slug, [other.id for other in conflicting])

        try:
            updated = await self.page_repo.update(page_id, is_published=publish)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise self._slug_taken(page.slug, []) from None

        logger.info(
            "Contact page publish state changed",
            extra={"page_id": str(page_id), "is_published": publish},
        )
        return ContactPageResponse.model_validate(updated)

    async def get_public_page(self, area_code: str) -> PublicContactPageResponse:
        """Published page by area code with its ordered roster."""
        page = await self.page_repo.get_published_by_area_code(area_code)
        if not page:
            raise NotFoundError("Contact page not found", details={"area_code": area_code})

        roster = await self.member_service.list_roster(page.id)
        members = [
            PublicMemberResponse(
                id=member.id,
                role=member.role,
                name=member.name or "",
                title=member.title or "",
                email=member.email or "",
                phone=member.phone or "",
                photo_url=member.photo_url,
                reasons=[reason.label for reason in member.reasons],
            )
            for member in roster
        ]

        return PublicContactPageResponse(
            id=page.id,
            customer_name=page.customer_name,
            area_code=page.area_code,
            brand_color=page.brand_color or settings.DEFAULT_BRAND_COLOR,
            intro_text=page.intro_text or "",
            logo_url=page.logo_url,
            is_published=page.is_published,
            members=members,
        )

    def _slug_taken(self, slug: str, conflicting_ids: List[UUID]) -> ConflictError:
        logger.warning("Publish rejected, slug in use", extra={"slug": slug})
        return ConflictError(
            f"Cannot publish: slug '{slug}' is already in use by another published page",
            details={"slug": slug, "conflicting_page_ids": [str(page_id) for page_id in conflicting_ids]},
        )
