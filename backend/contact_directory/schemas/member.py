"""
Contact page member Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID

from contact_directory.core.roles import ExternalRole
from contact_directory.schemas.reason import ReasonRef


class MemberCreate(BaseModel):
    """
    Schema for adding a contact to a page.
    ``role`` is kept as a plain string so the role codec can reject it.
    """
    contact_id: UUID
    role: str
    order_index: Optional[int] = Field(None, ge=0)


class MemberUpdate(BaseModel):
    """Schema for updating a member (all fields optional)."""
    role: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    reason_ids: Optional[List[UUID]] = None


class MemberResponse(BaseModel):
    """Roster entry with contact fields flattened in."""
    id: UUID
    page_id: UUID
    contact_id: UUID
    name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    role: ExternalRole
    order_index: int
    reasons: List[ReasonRef] = []


class RosterResponse(BaseModel):
    """Ordered roster of a page."""
    items: List[MemberResponse]
    total: int


class ReorderItem(BaseModel):
    """One (member, position) pair of a reorder batch."""
    member_id: UUID
    order_index: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    """Reorder batch for one page."""
    order: List[ReorderItem]


class ReorderFailure(BaseModel):
    """A pair of a reorder batch that was not applied."""
    member_id: UUID
    reason: str


class ReorderResponse(BaseModel):
    """Outcome of a reorder batch."""
    success: bool
    failures: List[ReorderFailure] = []
