"""
Contact page Pydantic schemas for request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID

from contact_directory.core.roles import ExternalRole


class ContactPageCreate(BaseModel):
    """Schema for creating a contact page. Area code format is checked by the service."""
    customer_name: str = Field(..., max_length=200)
    area_code: str
    brand_color: Optional[str] = Field(None, max_length=20)
    intro_text: Optional[str] = None
    logo_url: Optional[str] = Field(None, max_length=1000)


class ContactPageUpdate(BaseModel):
    """Schema for updating a contact page. Slug and area code never change."""
    customer_name: Optional[str] = Field(None, min_length=1, max_length=200)
    brand_color: Optional[str] = Field(None, max_length=20)
    intro_text: Optional[str] = None
    logo_url: Optional[str] = Field(None, max_length=1000)


class ContactPageResponse(BaseModel):
    """Schema for contact page response."""
    id: UUID
    customer_name: str
    area_code: str
    slug: str
    brand_color: Optional[str] = None
    intro_text: Optional[str] = None
    logo_url: Optional[str] = None
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContactPageListResponse(BaseModel):
    """Schema for contact page list response."""
    items: List[ContactPageResponse]
    total: int


class PublicMemberResponse(BaseModel):
    """Member as shown on the public page."""
    id: UUID
    role: ExternalRole
    name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""
    photo_url: Optional[str] = None
    reasons: List[str] = []


class PublicContactPageResponse(BaseModel):
    """Published page with its ordered roster."""
    id: UUID
    customer_name: str
    area_code: str
    brand_color: str
    intro_text: str = ""
    logo_url: Optional[str] = None
    is_published: bool
    members: List[PublicMemberResponse]
