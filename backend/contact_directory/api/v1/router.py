"""
API v1 router that aggregates all endpoint routers.
Admin routes pass the authorization gate; health and the public page do not.
"""

from fastapi import APIRouter, Depends
from contact_directory.api.v1.middleware import require_admin

from contact_directory.api.v1.endpoints import (
    health,
    public,
    contact_pages,
    members,
    reasons,
)

api_router = APIRouter()

# Public routes (no authorization required)
api_router.include_router(health.router, tags=["health"])
api_router.include_router(public.router, prefix="/public", tags=["public"])

# Admin routes (authorization gate enforced at the router level)
api_router.include_router(
    members.router,
    prefix="/contact-pages",
    tags=["members"],
    dependencies=[Depends(require_admin)],
)
api_router.include_router(
    contact_pages.router,
    prefix="/contact-pages",
    tags=["contact-pages"],
    dependencies=[Depends(require_admin)],
)
api_router.include_router(
    reasons.router,
    prefix="/contact-reasons",
    tags=["contact-reasons"],
    dependencies=[Depends(require_admin)],
)
