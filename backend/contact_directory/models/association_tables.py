"""
Association tables for many-to-many relationships.
"""

from sqlalchemy import Table, Column, ForeignKey
from sqlalchemy.dialects.postgresql import UUID

from contact_directory.db.base import Base

# Member ↔ Reason (many-to-many), always replaced as a whole set
member_reasons = Table(
    "contact_page_member_reasons",
    Base.metadata,
    Column("member_id", UUID(as_uuid=True), ForeignKey("contact_page_members.id", ondelete="CASCADE"), primary_key=True),
    Column("reason_id", UUID(as_uuid=True), ForeignKey("contact_reasons.id", ondelete="CASCADE"), primary_key=True),
)
