"""
Base controller class.
Controllers sit between the routers and the services and shape list responses.
"""

from abc import ABC


class BaseController(ABC):
    """Base class for contact directory controllers."""
    pass
