"""
API middleware for authorization.
Centralized enforcement of the admin gate for all mutating routes.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from contact_directory.core.logging import get_logger
from contact_directory.deps.di_container import get_container

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def require_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """
    Centralized authorization dependency for admin routes.

    Usage:
        api_router.include_router(router, dependencies=[Depends(require_admin)])

    Returns:
        The actor token that passed the gate

    Raises:
        HTTPException: 401 without credentials, 403 when the gate refuses
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    gate = get_container().authorization_gate()
    if not gate.is_authorized(credentials.credentials):
        logger.warning("Authorization gate refused actor")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Admin access required",
        )

    return credentials.credentials
