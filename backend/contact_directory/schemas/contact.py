"""
Contact Pydantic schemas.
"""

from pydantic import BaseModel
from typing import Optional, List
from uuid import UUID


class AvailableContactResponse(BaseModel):
    """Contact that can still be added to a page."""
    id: UUID
    name: str
    title: Optional[str] = None
    photo_url: Optional[str] = None

    class Config:
        from_attributes = True


class AvailableContactListResponse(BaseModel):
    """Schema for available contact list response."""
    items: List[AvailableContactResponse]
    total: int
