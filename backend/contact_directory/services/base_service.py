"""
Base service class.
Services own the business rules and decide when a session commits or rolls back.
"""

from abc import ABC


class BaseService(ABC):
    """Base class for contact directory services."""
    pass
