"""
Rate limiter shared by the app factory and public routes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from contact_directory.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

PUBLIC_RATE_LIMIT = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"
