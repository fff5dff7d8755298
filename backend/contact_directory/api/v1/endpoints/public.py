"""
Public contact page endpoint (no authorization).
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from contact_directory.core.rate_limit import limiter, PUBLIC_RATE_LIMIT
from contact_directory.db.session import get_db
from contact_directory.controllers.contact_page_controller import ContactPageController
from contact_directory.schemas.contact_page import PublicContactPageResponse

router = APIRouter()


@router.get("/contact-page/{area_code}", response_model=PublicContactPageResponse)
@limiter.limit(PUBLIC_RATE_LIMIT)
async def get_public_contact_page(
    request: Request,
    area_code: str,
    db: AsyncSession = Depends(get_db),
) -> PublicContactPageResponse:
    """Published page for an area code with its ordered roster."""
    controller = ContactPageController(db)
    return await controller.get_public_page(area_code)
