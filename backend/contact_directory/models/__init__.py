"""
Database models.
Import all models here to ensure they're registered with Base.
"""

from contact_directory.models.contact import Contact
from contact_directory.models.contact_page import ContactPage
from contact_directory.models.member import ContactPageMember
from contact_directory.models.reason import ContactReason
from contact_directory.models.association_tables import member_reasons

__all__ = [
    "Contact",
    "ContactPage",
    "ContactPageMember",
    "ContactReason",
    "member_reasons",
]
