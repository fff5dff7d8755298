"""
Contact page model.
"""

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from contact_directory.db.base import Base


class ContactPage(Base):
    """Public contact directory page for one customer, addressed by area code."""

    __tablename__ = "contact_pages"
    __table_args__ = (
        # At most one published page per slug; unpublished pages may share one.
        Index(
            "uq_contact_pages_published_slug",
            "slug",
            unique=True,
            postgresql_where=text("is_published"),
            sqlite_where=text("is_published = 1"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    customer_name = Column(String(200), nullable=False)
    area_code = Column(String(5), nullable=False, unique=True, index=True)
    slug = Column(String(255), nullable=False, index=True)
    brand_color = Column(String(20), nullable=True)
    intro_text = Column(Text, nullable=True)
    logo_url = Column(String(1000), nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    members = relationship(
        "ContactPageMember",
        back_populates="page",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
