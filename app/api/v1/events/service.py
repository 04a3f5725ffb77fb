"""Event MyCSD metadata: ownership checks, read with preview points, organizer/admin edits."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.mycsd.points import points_for_level, resolve_category
from app.auth.rbac import is_admin
from app.auth.schemas import CurrentUser
from app.core.enums import EventStatus, UserRole
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.models import Event

from .schemas import EventMyCSDResponse, EventMyCSDUpdate


async def get_event_with_proposal(
    db: AsyncSession,
    event_id: UUID,
    for_update: bool = False,
) -> Optional[Event]:
    q = select(Event).options(selectinload(Event.proposal)).where(Event.id == event_id)
    if for_update:
        q = q.with_for_update()
    return (await db.execute(q)).scalar_one_or_none()


def is_event_organizer(event: Event, user: CurrentUser) -> bool:
    """True if user owns the event's proposal or belongs to the proposing organization."""
    if user.role != UserRole.ORGANIZER.value:
        return False
    proposal = event.proposal
    if proposal is None:
        return False
    if proposal.user_id == user.id:
        return True
    return user.organization_id is not None and proposal.organization_id == user.organization_id


def ensure_can_manage_event(event: Event, user: CurrentUser) -> None:
    if is_admin(user.role) or is_event_organizer(event, user):
        return
    raise ForbiddenError("Only the event organizer or an admin can manage this event")


def event_points(event: Event) -> int:
    if event.is_mycsd_claimed and event.mycsd_points is not None:
        return event.mycsd_points
    return points_for_level(event.mycsd_level)


def _event_to_response(event: Event) -> EventMyCSDResponse:
    return EventMyCSDResponse(
        event_id=event.id,
        title=event.title,
        status=event.status,
        event_date=event.event_date,
        level=event.mycsd_level,
        category=event.mycsd_category,
        has_mycsd=event.has_mycsd,
        is_mycsd_claimed=event.is_mycsd_claimed,
        points=event_points(event),
    )


async def get_event_mycsd(db: AsyncSession, event_id: UUID) -> EventMyCSDResponse:
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return _event_to_response(event)


async def update_event_mycsd(
    db: AsyncSession,
    event_id: UUID,
    payload: EventMyCSDUpdate,
    current_user: CurrentUser,
) -> EventMyCSDResponse:
    """
    Admins may edit at any time (e.g. to correct the level before approving a claim).
    Organizers may edit only until the event is published.
    """
    event = await get_event_with_proposal(db, event_id)
    if not event:
        raise NotFoundError("Event not found")
    ensure_can_manage_event(event, current_user)
    if not is_admin(current_user.role) and event.status != EventStatus.DRAFT.value:
        raise ForbiddenError("MyCSD details can no longer be changed after the event is published")

    if payload.level is not None:
        level = payload.level.strip()
        if not level:
            raise ValidationError("level cannot be empty")
        event.mycsd_level = level
    if payload.category is not None:
        category = resolve_category(payload.category)
        if category is None:
            raise ValidationError(f"Unknown MyCSD category: {payload.category}")
        event.mycsd_category = category.value
    if payload.has_mycsd is not None:
        event.has_mycsd = payload.has_mycsd
    await db.commit()
    await db.refresh(event)
    return _event_to_response(event)
