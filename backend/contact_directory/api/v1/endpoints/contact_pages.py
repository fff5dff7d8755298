"""
Contact page API endpoints.
"""

from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from contact_directory.db.session import get_db
from contact_directory.controllers.contact_page_controller import ContactPageController
from contact_directory.schemas.contact_page import (
    ContactPageCreate,
    ContactPageUpdate,
    ContactPageResponse,
    ContactPageListResponse,
)

router = APIRouter()


@router.post("", response_model=ContactPageResponse, status_code=status.HTTP_201_CREATED)
async def create_contact_page(
    page_data: ContactPageCreate,
    db: AsyncSession = Depends(get_db),
) -> ContactPageResponse:
    """Create a new, unpublished contact page."""
    controller = ContactPageController(db)
    return await controller.create_page(page_data)


@router.get("", response_model=ContactPageListResponse)
async def list_contact_pages(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> ContactPageListResponse:
    """List contact pages, newest first."""
    controller = ContactPageController(db)
    return await controller.list_pages(skip=skip, limit=limit)


@router.get("/{page_id}", response_model=ContactPageResponse)
async def get_contact_page(
    page_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ContactPageResponse:
    """Get contact page by ID."""
    controller = ContactPageController(db)
    page = await controller.get_page(page_id)
    if not page:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Contact page not found",
        )
    return page


@router.put("/{page_id}", response_model=ContactPageResponse)
async def update_contact_page(
    page_id: UUID,
    page_data: ContactPageUpdate,
    db: AsyncSession = Depends(get_db),
) -> ContactPageResponse:
    """Update a contact page."""
    controller = ContactPageController(db)
    page = await controller.update_page(page_id, page_data)
    if not page:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Contact page not found",
        )
    return page


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact_page(
    page_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a contact page with its members."""
    controller = ContactPageController(db)
    deleted = await controller.delete_page(page_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Contact page not found",
        )


@router.patch("/{page_id}/publish", response_model=ContactPageResponse)
async def toggle_publish(
    page_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ContactPageResponse:
    """Publish or unpublish a page. 409 when the slug is taken by another published page."""
    controller = ContactPageController(db)
    return await controller.toggle_publish(page_id)
