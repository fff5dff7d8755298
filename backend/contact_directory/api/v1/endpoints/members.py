"""
Contact page member API endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from contact_directory.db.session import get_db
from contact_directory.controllers.member_controller import MemberController
from contact_directory.schemas.contact import AvailableContactListResponse
from contact_directory.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberResponse,
    RosterResponse,
    ReorderRequest,
    ReorderResponse,
)
from contact_directory.schemas.reason import MemberReasonsUpdate, ReasonRef

router = APIRouter()


@router.get("/{page_id}/members", response_model=RosterResponse)
async def get_roster(
    page_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> RosterResponse:
    """Ordered roster of a page."""
    controller = MemberController(db)
    return await controller.get_roster(page_id)


@router.post("/{page_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    page_id: UUID,
    member_data: MemberCreate,
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    """Add a contact to a page. 409 if the contact is already on it."""
    controller = MemberController(db)
    return await controller.add_member(page_id, member_data)


@router.patch("/{page_id}/members/reorder", response_model=ReorderResponse)
async def reorder_members(
    page_id: UUID,
    reorder_data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
) -> ReorderResponse:
    """Apply a reorder batch. 207 with the failing pairs on partial failure."""
    controller = MemberController(db)
    return await controller.reorder(page_id, reorder_data)


@router.get("/{page_id}/available-contacts", response_model=AvailableContactListResponse)
async def list_available_contacts(
    page_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> AvailableContactListResponse:
    """Active contacts not yet on the page."""
    controller = MemberController(db)
    return await controller.list_available_contacts(page_id)


@router.put("/members/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: UUID,
    member_data: MemberUpdate,
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    """Update role, position and/or the full reason set of a member."""
    controller = MemberController(db)
    return await controller.update_member(member_id, member_data)


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    member_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Remove a member and its reason assignments."""
    controller = MemberController(db)
    await controller.remove_member(member_id)


@router.post("/members/{member_id}/reasons", response_model=List[ReasonRef])
async def replace_member_reasons(
    member_id: UUID,
    reasons_data: MemberReasonsUpdate,
    db: AsyncSession = Depends(get_db),
) -> List[ReasonRef]:
    """Replace the member's reason set with exactly ``reason_ids``."""
    controller = MemberController(db)
    return await controller.replace_member_reasons(member_id, reasons_data.reason_ids)
