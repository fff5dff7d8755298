"""
Contact page member model (ordered roster entry).
"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from contact_directory.db.base import Base


class ContactPageMember(Base):
    """A contact placed on a contact page with a role and a display position."""

    __tablename__ = "contact_page_members"
    __table_args__ = (
        UniqueConstraint("page_id", "contact_id", name="uq_contact_page_member_contact"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    page_id = Column(UUID(as_uuid=True), ForeignKey("contact_pages.id", ondelete="CASCADE"), nullable=False, index=True)
    contact_id = Column(UUID(as_uuid=True), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(32), nullable=False)  # canonical role, see core.roles
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    page = relationship("ContactPage", back_populates="members")
    contact = relationship("Contact")
