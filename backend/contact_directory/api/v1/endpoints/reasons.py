"""
Contact reason API endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from contact_directory.db.session import get_db
from contact_directory.controllers.reason_controller import ReasonController
from contact_directory.schemas.reason import ReasonCreate, ReasonUpdate, ReasonResponse, ReasonListResponse

router = APIRouter()


@router.get("", response_model=ReasonListResponse)
async def list_reasons(
    db: AsyncSession = Depends(get_db),
) -> ReasonListResponse:
    """List the reason catalog."""
    controller = ReasonController(db)
    return await controller.list_reasons()


@router.post("", response_model=ReasonResponse, status_code=status.HTTP_201_CREATED)
async def create_reason(
    reason_data: ReasonCreate,
    db: AsyncSession = Depends(get_db),
) -> ReasonResponse:
    """Create a reason."""
    controller = ReasonController(db)
    return await controller.create_reason(reason_data)


@router.put("/{reason_id}", response_model=ReasonResponse)
async def update_reason(
    reason_id: UUID,
    reason_data: ReasonUpdate,
    db: AsyncSession = Depends(get_db),
) -> ReasonResponse:
    """Update a reason."""
    controller = ReasonController(db)
    return await controller.update_reason(reason_id, reason_data)


@router.delete("/{reason_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reason(
    reason_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a reason and every assignment of it."""
    controller = ReasonController(db)
    await controller.delete_reason(reason_id)
