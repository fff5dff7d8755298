"""
Contact reason model (global catalog of reusable tags).
"""

from sqlalchemy import Column, String, Text, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
import uuid

from contact_directory.db.base import Base


class ContactReason(Base):
    """Reason a visitor might reach out to a member, e.g. "Invoices"."""

    __tablename__ = "contact_reasons"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    label = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
