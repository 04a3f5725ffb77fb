"""Notification rows for the in-app inbox. MyCSD award/rejection messages are created here."""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.enums import NotificationType
from app.core.exceptions import NotFoundError
from app.core.models import Notification

from .schemas import NotificationResponse


POINTS_AWARDED_TITLE = "MyCSD Points Awarded"
CLAIM_REJECTED_TITLE = "MyCSD Claim Rejected"


def points_awarded_message(points: int, event_title: str) -> str:
    return f"You have received {points} MyCSD points for attending {event_title}."


async def notify_points_awarded(
    db: AsyncSession,
    user_ids: Iterable[UUID],
    points: int,
    event_title: str,
) -> int:
    """Queue one notification per recipient and flush. Returns number queued."""
    message = points_awarded_message(points, event_title)
    rows = [
        Notification(
            user_id=user_id,
            type=NotificationType.MYCSD.value,
            title=POINTS_AWARDED_TITLE,
            message=message,
            link=settings.mycsd_notification_link,
        )
        for user_id in user_ids
    ]
    db.add_all(rows)
    await db.flush()
    return len(rows)


async def notify_claim_rejected(
    db: AsyncSession,
    user_id: Optional[UUID],
    event_title: str,
    reason: str,
) -> None:
    if user_id is None:
        return
    db.add(
        Notification(
            user_id=user_id,
            type=NotificationType.MYCSD.value,
            title=CLAIM_REJECTED_TITLE,
            message=f"Your MyCSD claim for {event_title} was rejected: {reason}",
            link="/organizer/dashboard",
        )
    )
    await db.flush()


async def list_notifications(
    db: AsyncSession,
    user_id: UUID,
    unread_only: bool = False,
) -> List[NotificationResponse]:
    q = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        q = q.where(Notification.is_read.is_(False))
    q = q.order_by(Notification.created_at.desc())
    result = await db.execute(q)
    return [NotificationResponse.model_validate(n) for n in result.scalars().all()]


async def mark_notification_read(
    db: AsyncSession,
    notification_id: UUID,
    user_id: UUID,
) -> NotificationResponse:
    n = await db.get(Notification, notification_id)
    if not n or n.user_id != user_id:
        raise NotFoundError("Notification not found")
    n.is_read = True
    await db.commit()
    await db.refresh(n)
    return NotificationResponse.model_validate(n)
