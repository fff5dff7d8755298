"""
Contact reason Pydantic schemas for request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID


class ReasonCreate(BaseModel):
    """Schema for creating a reason. Label is trimmed and checked by the service."""
    label: str = Field(..., max_length=200)
    description: Optional[str] = None


class ReasonUpdate(BaseModel):
    """Schema for updating a reason (all fields optional)."""
    label: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None


class ReasonResponse(BaseModel):
    """Schema for reason response."""
    id: UUID
    label: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReasonRef(BaseModel):
    """Reason as attached to a member."""
    id: UUID
    label: str

    class Config:
        from_attributes = True


class ReasonListResponse(BaseModel):
    """Schema for reason catalog response."""
    items: List[ReasonResponse]
    total: int


class MemberReasonsUpdate(BaseModel):
    """Full replacement set of reasons for a member."""
    reason_ids: List[UUID] = Field(default_factory=list)
