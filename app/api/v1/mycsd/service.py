"""MyCSD claims: submit (upsert by event), approve with point distribution, reject, list."""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.events.service import ensure_can_manage_event, get_event_with_proposal
from app.api.v1.notifications import service as notification_service
from app.auth.models import StudentProfile, User
from app.auth.rbac import is_admin
from app.auth.schemas import CurrentUser
from app.core.enums import AttendanceStatus, ClaimAction, ClaimStatus
from app.core.exceptions import (
    DependencyFailureError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.core.models import (
    Event,
    EventProposal,
    MyCSDLog,
    MyCSDRecord,
    MyCSDRequest,
    Organization,
    Registration,
)
from app.core.models.mycsd_log import POSITION_PARTICIPANT

from .audit_service import log_claim_audit
from .points import effective_category, effective_level, points_for_level, resolve_category, resolve_level
from .schemas import ApprovalResult, ClaimListItem, ClaimResponse, ClaimSubmit


logger = logging.getLogger(__name__)

RETRY_MESSAGE = "The claim is still pending and can be approved again."

# Rows per INSERT; keeps each statement under the driver's bind parameter limit (asyncpg: 32767)
DISTRIBUTION_CHUNK_SIZE = 1000


def _claim_to_response(claim: MyCSDRequest, points: int) -> ClaimResponse:
    return ClaimResponse(
        id=claim.id,
        event_id=claim.event_id,
        user_id=claim.user_id,
        proposed_level=claim.proposed_level,
        proposed_category=claim.proposed_category,
        lk_document=claim.lk_document,
        status=ClaimStatus(claim.status),
        rejection_reason=claim.rejection_reason,
        reviewed_by=claim.reviewed_by,
        reviewed_at=claim.reviewed_at,
        submitted_at=claim.submitted_at,
        updated_at=claim.updated_at,
        points=points,
    )


def _ensure_pending(claim: MyCSDRequest) -> None:
    """Only pending claims can be reviewed. Every status is handled explicitly."""
    try:
        current = ClaimStatus(claim.status)
    except ValueError:
        raise InvalidStateError(f"Claim has unknown status '{claim.status}'")
    if current is ClaimStatus.pending:
        return
    if current is ClaimStatus.approved:
        raise InvalidStateError("Claim has already been approved")
    if current is ClaimStatus.rejected:
        raise InvalidStateError("Claim has been rejected; the organizer must resubmit it")


async def _get_claim(db: AsyncSession, claim_id: UUID, for_update: bool = False) -> Optional[MyCSDRequest]:
    q = select(MyCSDRequest).where(MyCSDRequest.id == claim_id)
    if for_update:
        q = q.with_for_update()
    return (await db.execute(q)).scalar_one_or_none()


async def _get_claim_by_event(db: AsyncSession, event_id: UUID) -> Optional[MyCSDRequest]:
    q = select(MyCSDRequest).where(MyCSDRequest.event_id == event_id).with_for_update()
    return (await db.execute(q)).scalar_one_or_none()


async def _transition(
    db: AsyncSession,
    claim_id: UUID,
    to_status: ClaimStatus,
    reviewer_id: UUID,
    rejection_reason: Optional[str] = None,
) -> bool:
    """Compare-and-swap pending -> to_status. False if another request got there first."""
    now = datetime.utcnow()
    values = {
        "status": to_status.value,
        "reviewed_by": reviewer_id,
        "reviewed_at": now,
        "updated_at": now,
    }
    if to_status is ClaimStatus.rejected:
        values["rejection_reason"] = rejection_reason
    result = await db.execute(
        update(MyCSDRequest)
        .where(
            MyCSDRequest.id == claim_id,
            MyCSDRequest.status == ClaimStatus.pending.value,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


# ----- Submit -----
async def _apply_submission(
    db: AsyncSession,
    payload: ClaimSubmit,
    document: str,
    level: str,
    category: str,
    current_user: CurrentUser,
) -> Tuple[MyCSDRequest, Event]:
    event = await get_event_with_proposal(db, payload.event_id, for_update=True)
    if not event:
        raise NotFoundError("Event not found")
    ensure_can_manage_event(event, current_user)
    if event.is_mycsd_claimed:
        raise InvalidStateError("MyCSD points have already been awarded for this event")

    claim = await _get_claim_by_event(db, event.id)
    if claim is not None and claim.status == ClaimStatus.approved.value:
        raise InvalidStateError("MyCSD claim has already been approved for this event")

    # Visible on the admin review screen before any ledger entry exists
    event.mycsd_level = level
    event.mycsd_category = category
    event.has_mycsd = True

    now = datetime.utcnow()
    if claim is None:
        owner_id = event.proposal.user_id if event.proposal else current_user.id
        claim = MyCSDRequest(
            event_id=event.id,
            user_id=owner_id,
            proposed_level=level,
            proposed_category=category,
            lk_document=document,
            status=ClaimStatus.pending.value,
            submitted_at=now,
        )
        db.add(claim)
        await db.flush()
        await log_claim_audit(
            db, claim.id, ClaimAction.SUBMITTED, current_user.id, current_user.role,
            to_status=ClaimStatus.pending.value,
        )
    else:
        from_status = claim.status
        claim.lk_document = document
        claim.proposed_level = level
        claim.proposed_category = category
        claim.status = ClaimStatus.pending.value
        # Previous rejection reason is kept in the audit log only
        claim.rejection_reason = None
        claim.reviewed_by = None
        claim.reviewed_at = None
        claim.submitted_at = now
        await db.flush()
        await log_claim_audit(
            db, claim.id, ClaimAction.RESUBMITTED, current_user.id, current_user.role,
            from_status=from_status,
            to_status=ClaimStatus.pending.value,
        )
    return claim, event


async def submit_claim(
    db: AsyncSession,
    payload: ClaimSubmit,
    current_user: CurrentUser,
) -> ClaimResponse:
    """
    Create or reopen the claim for an event and copy the proposed level/category onto the event.
    No points are awarded here.
    """
    document = (payload.document_url or "").strip()
    if not document:
        raise ValidationError("A proof document (Laporan Kejayaan) is required")
    level = (payload.level or "").strip()
    if not level:
        raise ValidationError("MyCSD level is required")
    category = resolve_category(payload.category)
    if category is None:
        raise ValidationError(f"Unknown MyCSD category: {payload.category}")

    # A concurrent first submission can win the unique event_id insert; retry once as an update.
    for attempt in range(2):
        try:
            claim, event = await _apply_submission(db, payload, document, level, category.value, current_user)
            await db.commit()
            break
        except IntegrityError:
            await db.rollback()
            if attempt == 1:
                raise InvalidStateError("Another submission for this event is in progress; try again")
        except SQLAlchemyError:
            await db.rollback()
            raise DependencyFailureError("Could not save the MyCSD claim; please try again")

    await db.refresh(claim)
    logger.info("MyCSD claim %s submitted for event %s by %s", claim.id, claim.event_id, current_user.id)
    return _claim_to_response(claim, points_for_level(level))


# ----- Approve -----
async def _present_recipients(db: AsyncSession, event_id: UUID) -> Dict[str, UUID]:
    """matric_no -> user_id for every present attendee with a matric number."""
    result = await db.execute(
        select(Registration.user_id, StudentProfile.matric_num)
        .outerjoin(StudentProfile, StudentProfile.user_id == Registration.user_id)
        .where(
            Registration.event_id == event_id,
            Registration.attendance == AttendanceStatus.PRESENT.value,
        )
    )
    recipients: Dict[str, UUID] = {}
    for user_id, matric in result.all():
        matric = (matric or "").strip()
        if not matric:
            continue
        recipients.setdefault(matric, user_id)
    return recipients


async def distribute_points(
    db: AsyncSession,
    record: MyCSDRecord,
    matric_numbers: List[str],
) -> int:
    """
    One mycsd_logs row per student for this ledger entry, inserted in chunks within the caller's transaction.
    Rows that already exist are left alone so a retried batch cannot double-award.
    """
    if not matric_numbers:
        return 0
    now = datetime.utcnow()
    rows = [
        {
            "id": uuid.uuid4(),
            "matric_no": matric,
            "record_id": record.id,
            "score": record.mycsd_score,
            "position": POSITION_PARTICIPANT,
            "created_at": now,
        }
        for matric in matric_numbers
    ]
    dialect = db.get_bind().dialect.name
    insert_fn = postgresql.insert if dialect == "postgresql" else sqlite.insert
    for start in range(0, len(rows), DISTRIBUTION_CHUNK_SIZE):
        chunk = rows[start:start + DISTRIBUTION_CHUNK_SIZE]
        stmt = insert_fn(MyCSDLog).values(chunk).on_conflict_do_nothing(index_elements=["matric_no", "record_id"])
        await db.execute(stmt)
    count = await db.execute(select(func.count(MyCSDLog.id)).where(MyCSDLog.record_id == record.id))
    return count.scalar_one()


async def _notify_recipients(db: AsyncSession, user_ids: List[UUID], points: int, event_title: str) -> None:
    """Best effort: a failure here is logged and never undoes the award."""
    if not user_ids:
        return
    try:
        async with db.begin_nested():
            await notification_service.notify_points_awarded(db, user_ids, points, event_title)
    except Exception:
        logger.warning("Could not queue MyCSD award notifications for %s", event_title, exc_info=True)


async def approve_claim(
    db: AsyncSession,
    claim_id: UUID,
    current_user: CurrentUser,
) -> ApprovalResult:
    """
    Approve a pending claim:
    1. ledger entry scored from the event's current level
    2. one distribution entry per present attendee with a matric number
    3. notifications (best effort)
    4. claim -> approved, event claimed with points frozen
    Everything commits together; any failure before the commit leaves the claim pending.
    """
    if not is_admin(current_user.role):
        raise ForbiddenError("Only an admin can approve MyCSD claims")

    claim = await _get_claim(db, claim_id, for_update=True)
    if not claim:
        await db.rollback()
        raise NotFoundError("MyCSD claim not found")
    event = await db.get(Event, claim.event_id)
    if not event:
        await db.rollback()
        raise NotFoundError("Event not found for this claim")
    try:
        _ensure_pending(claim)
    except InvalidStateError:
        await db.rollback()
        raise

    level_label = effective_level(event.mycsd_level)
    final_score = points_for_level(level_label)
    final_level = resolve_level(level_label)
    final_category = effective_category(event.mycsd_category)

    try:
        record = MyCSDRecord(
            request_id=claim.id,
            event_id=event.id,
            mycsd_score=final_score,
            mycsd_category=final_category.value,
            event_level=final_level.value,
        )
        db.add(record)
        await db.flush()

        recipients = await _present_recipients(db, event.id)
        distributed = await distribute_points(db, record, list(recipients.keys()))
    except IntegrityError:
        await db.rollback()
        raise InvalidStateError("Claim has already been approved")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("MyCSD approval failed for claim %s", claim_id)
        raise DependencyFailureError(f"Could not award MyCSD points. {RETRY_MESSAGE}")

    await _notify_recipients(db, list(recipients.values()), final_score, event.title)

    try:
        if not await _transition(db, claim_id, ClaimStatus.approved, current_user.id):
            await db.rollback()
            raise InvalidStateError("Claim has already been reviewed")
        event.is_mycsd_claimed = True
        event.has_mycsd = True
        event.mycsd_points = final_score
        await log_claim_audit(
            db, claim_id, ClaimAction.APPROVED, current_user.id, current_user.role,
            from_status=ClaimStatus.pending.value,
            to_status=ClaimStatus.approved.value,
            remarks=f"{final_score} points to {distributed} participants",
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("MyCSD approval commit failed for claim %s", claim_id)
        raise DependencyFailureError(f"Could not award MyCSD points. {RETRY_MESSAGE}")

    await db.refresh(claim)
    await db.refresh(record)
    logger.info(
        "MyCSD claim %s approved: event=%s score=%s category=%s level=%s recipients=%s",
        claim.id, event.id, final_score, final_category.value, final_level.value, distributed,
    )
    return ApprovalResult(
        claim=_claim_to_response(claim, record.mycsd_score),
        record_id=record.id,
        score=record.mycsd_score,
        category=record.mycsd_category,
        level=record.event_level,
        distributed_count=distributed,
    )


# ----- Reject -----
async def reject_claim(
    db: AsyncSession,
    claim_id: UUID,
    current_user: CurrentUser,
    reason: Optional[str],
) -> ClaimResponse:
    """Reject a pending claim with a reason the organizer can act on. No points, no event change."""
    if not is_admin(current_user.role):
        raise ForbiddenError("Only an admin can reject MyCSD claims")
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required")

    claim = await _get_claim(db, claim_id, for_update=True)
    if not claim:
        await db.rollback()
        raise NotFoundError("MyCSD claim not found")
    try:
        _ensure_pending(claim)
    except InvalidStateError:
        await db.rollback()
        raise
    event = await db.get(Event, claim.event_id)

    try:
        if not await _transition(db, claim_id, ClaimStatus.rejected, current_user.id, rejection_reason=reason):
            await db.rollback()
            raise InvalidStateError("Claim has already been reviewed")
        await log_claim_audit(
            db, claim_id, ClaimAction.REJECTED, current_user.id, current_user.role,
            from_status=ClaimStatus.pending.value,
            to_status=ClaimStatus.rejected.value,
            remarks=reason,
        )
        try:
            async with db.begin_nested():
                await notification_service.notify_claim_rejected(
                    db, claim.user_id, event.title if event else "your event", reason
                )
        except Exception:
            logger.warning("Could not queue rejection notification for claim %s", claim_id, exc_info=True)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise DependencyFailureError("Could not reject the MyCSD claim; please try again")

    await db.refresh(claim)
    logger.info("MyCSD claim %s rejected by %s", claim.id, current_user.id)
    return _claim_to_response(claim, points_for_level(event.mycsd_level if event else None))


# ----- Read -----
async def _awarded_scores(db: AsyncSession, claim_ids: List[UUID]) -> Dict[UUID, int]:
    if not claim_ids:
        return {}
    result = await db.execute(
        select(MyCSDRecord.request_id, MyCSDRecord.mycsd_score).where(MyCSDRecord.request_id.in_(claim_ids))
    )
    return {request_id: score for request_id, score in result.all()}


async def get_claim(
    db: AsyncSession,
    claim_id: UUID,
    current_user: CurrentUser,
) -> ClaimResponse:
    claim = await _get_claim(db, claim_id)
    if not claim:
        raise NotFoundError("MyCSD claim not found")
    event = await get_event_with_proposal(db, claim.event_id)
    if not is_admin(current_user.role):
        if event is None:
            raise ForbiddenError("Only the event organizer or an admin can view this claim")
        ensure_can_manage_event(event, current_user)
    awarded = await _awarded_scores(db, [claim.id])
    points = awarded.get(claim.id)
    if points is None:
        points = points_for_level(event.mycsd_level if event else None)
    return _claim_to_response(claim, points)


async def list_claims(
    db: AsyncSession,
    status_filter: Optional[ClaimStatus] = None,
) -> List[ClaimListItem]:
    """Admin review list, newest submission first."""
    q = (
        select(MyCSDRequest)
        .options(
            selectinload(MyCSDRequest.event).selectinload(Event.proposal).selectinload(EventProposal.organization),
            selectinload(MyCSDRequest.submitter),
        )
        .order_by(MyCSDRequest.submitted_at.desc())
    )
    if status_filter is not None:
        q = q.where(MyCSDRequest.status == status_filter.value)
    claims = (await db.execute(q)).scalars().all()
    if not claims:
        return []

    event_ids = [c.event_id for c in claims]
    counts_result = await db.execute(
        select(Registration.event_id, func.count(Registration.id))
        .where(
            Registration.event_id.in_(event_ids),
            Registration.attendance == AttendanceStatus.PRESENT.value,
        )
        .group_by(Registration.event_id)
    )
    participant_counts = {event_id: n for event_id, n in counts_result.all()}
    awarded = await _awarded_scores(db, [c.id for c in claims])

    items: List[ClaimListItem] = []
    for c in claims:
        event: Optional[Event] = c.event
        proposal: Optional[EventProposal] = event.proposal if event else None
        organization: Optional[Organization] = proposal.organization if proposal else None
        submitter: Optional[User] = c.submitter
        level_label = event.mycsd_level if event else c.proposed_level
        category_label = event.mycsd_category if event else c.proposed_category
        points = awarded.get(c.id)
        if points is None:
            points = points_for_level(level_label)
        items.append(
            ClaimListItem(
                id=c.id,
                event_id=c.event_id,
                event_name=event.title if event else "Unknown Event",
                organization_name=organization.name if organization else "Unknown Organization",
                user_id=c.user_id,
                user_name=submitter.full_name if submitter else "Unknown User",
                category=effective_category(category_label).value,
                level=resolve_level(effective_level(level_label)).value,
                points=points,
                status=ClaimStatus(c.status),
                proof_document=c.lk_document,
                rejection_reason=c.rejection_reason,
                participant_count=participant_counts.get(c.event_id, 0),
                submitted_at=c.submitted_at,
            )
        )
    return items
