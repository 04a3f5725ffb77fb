from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import EventMyCSDResponse, EventMyCSDUpdate
from . import service

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.get("/{event_id}/mycsd", response_model=EventMyCSDResponse)
async def get_event_mycsd(
    event_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> EventMyCSDResponse:
    """MyCSD level, category and points for an event."""
    try:
        return await service.get_event_mycsd(db, event_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{event_id}/mycsd", response_model=EventMyCSDResponse)
async def update_event_mycsd(
    event_id: UUID,
    payload: EventMyCSDUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.ORGANIZER)),
) -> EventMyCSDResponse:
    """Edit MyCSD level/category. Organizers until publish; admins any time."""
    try:
        return await service.update_event_mycsd(db, event_id, payload, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
