"""
Read-only MyCSD reporting over the distribution ledger.

Distribution entries only exist for approved claims, so no status filtering is needed here.
A fan-out still in flight simply under-counts until it commits.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.mycsd.points import effective_category, resolve_level
from app.auth.models import StudentProfile
from app.auth.schemas import CurrentUser
from app.core.enums import ClaimStatus, MyCSDCategory, MyCSDLevel
from app.core.models import Event, EventProposal, MyCSDLog, MyCSDRecord, MyCSDRequest, Organization

from .schemas import AdminOverview, MonthlyPoints, MyCSDSummary, StudentRecordItem


def empty_category_buckets() -> Dict[str, int]:
    return {c.value: 0 for c in MyCSDCategory}


def empty_level_buckets() -> Dict[str, int]:
    return {lvl.value: 0 for lvl in MyCSDLevel}


def _same_month(value, today: date) -> bool:
    return value is not None and value.year == today.year and value.month == today.month


def _shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


async def resolve_matric(db: AsyncSession, user_id: UUID) -> Optional[str]:
    """Student-id lookup: user -> matriculation number, None if the user has none."""
    result = await db.execute(select(StudentProfile.matric_num).where(StudentProfile.user_id == user_id))
    matric = result.scalar_one_or_none()
    if matric and matric.strip():
        return matric.strip()
    return None


async def summarize(
    db: AsyncSession,
    matric_no: Optional[str],
    today: Optional[date] = None,
) -> MyCSDSummary:
    """Totals, category/level breakdown and this-month figures for one student."""
    today = today or datetime.utcnow().date()
    summary = MyCSDSummary(
        matric_no=matric_no,
        points_by_category=empty_category_buckets(),
        points_by_level=empty_level_buckets(),
    )
    matric_no = (matric_no or "").strip()
    if not matric_no:
        return summary

    result = await db.execute(
        select(
            MyCSDLog.score,
            MyCSDRecord.mycsd_category,
            MyCSDRecord.event_level,
            MyCSDRecord.event_id,
            MyCSDRecord.created_at,
            Event.event_date,
        )
        .join(MyCSDRecord, MyCSDRecord.id == MyCSDLog.record_id)
        .outerjoin(Event, Event.id == MyCSDRecord.event_id)
        .where(MyCSDLog.matric_no == matric_no)
    )

    events = set()
    events_this_month = set()
    for score, category, level, event_id, recorded_at, event_date in result.all():
        summary.total_points += score
        events.add(event_id)
        summary.points_by_category[effective_category(category).value] += score
        summary.points_by_level[resolve_level(level).value] += score
        # Month is taken from the event date; the ledger timestamp covers events without one
        if _same_month(event_date or recorded_at, today):
            events_this_month.add(event_id)
            summary.points_this_month += score

    summary.total_events = len(events)
    summary.events_this_month = len(events_this_month)
    return summary


async def summarize_for_user(
    db: AsyncSession,
    current_user: CurrentUser,
    today: Optional[date] = None,
) -> MyCSDSummary:
    matric = current_user.matric_num or await resolve_matric(db, current_user.id)
    return await summarize(db, matric, today=today)


async def list_student_records(db: AsyncSession, matric_no: Optional[str]) -> List[StudentRecordItem]:
    """Every point award for one student, newest first."""
    matric_no = (matric_no or "").strip()
    if not matric_no:
        return []
    result = await db.execute(
        select(MyCSDLog, MyCSDRecord, Event, Organization.name)
        .join(MyCSDRecord, MyCSDRecord.id == MyCSDLog.record_id)
        .join(Event, Event.id == MyCSDRecord.event_id)
        .outerjoin(EventProposal, EventProposal.id == Event.proposal_id)
        .outerjoin(Organization, Organization.id == EventProposal.organization_id)
        .where(MyCSDLog.matric_no == matric_no)
        .order_by(MyCSDLog.created_at.desc())
    )
    return [
        StudentRecordItem(
            record_id=record.id,
            event_id=event.id,
            event_name=event.title,
            organization_name=org_name or "Unknown Organization",
            event_date=event.event_date,
            category=effective_category(record.mycsd_category).value,
            level=resolve_level(record.event_level).value,
            position=log.position,
            points=log.score,
            awarded_at=log.created_at,
        )
        for log, record, event, org_name in result.all()
    ]


async def admin_overview(
    db: AsyncSession,
    months: int = 6,
    today: Optional[date] = None,
) -> AdminOverview:
    """Dashboard figures: claim counts, points awarded, breakdowns and a monthly series."""
    today = today or datetime.utcnow().date()
    months = max(months, 1)

    claims_by_status = {s.value: 0 for s in ClaimStatus}
    status_rows = await db.execute(
        select(MyCSDRequest.status, func.count(MyCSDRequest.id)).group_by(MyCSDRequest.status)
    )
    for status_value, n in status_rows.all():
        if status_value in claims_by_status:
            claims_by_status[status_value] = n

    totals = await db.execute(select(func.coalesce(func.sum(MyCSDLog.score), 0), func.count(MyCSDLog.id)))
    total_points, total_distributions = totals.one()

    points_by_category = empty_category_buckets()
    points_by_level = empty_level_buckets()
    breakdown = await db.execute(
        select(MyCSDRecord.mycsd_category, MyCSDRecord.event_level, func.sum(MyCSDLog.score))
        .join(MyCSDLog, MyCSDLog.record_id == MyCSDRecord.id)
        .group_by(MyCSDRecord.mycsd_category, MyCSDRecord.event_level)
    )
    for category, level, points in breakdown.all():
        points_by_category[effective_category(category).value] += int(points or 0)
        points_by_level[resolve_level(level).value] += int(points or 0)

    # One extra month before the window so the first delta has a baseline
    window = [_shift_month(today.year, today.month, -offset) for offset in range(months, -1, -1)]
    start_year, start_month = window[0]
    per_month: Dict[Tuple[int, int], int] = {key: 0 for key in window}
    monthly_rows = await db.execute(
        select(MyCSDLog.score, MyCSDLog.created_at).where(
            MyCSDLog.created_at >= datetime(start_year, start_month, 1)
        )
    )
    for score, created_at in monthly_rows.all():
        key = (created_at.year, created_at.month)
        if key in per_month:
            per_month[key] += score

    monthly: List[MonthlyPoints] = []
    for previous, current in zip(window, window[1:]):
        points = per_month[current]
        monthly.append(
            MonthlyPoints(
                month=f"{current[0]:04d}-{current[1]:02d}",
                points=points,
                delta=points - per_month[previous],
            )
        )

    return AdminOverview(
        claims_by_status=claims_by_status,
        total_points_awarded=int(total_points or 0),
        total_distributions=int(total_distributions or 0),
        points_by_category=points_by_category,
        points_by_level=points_by_level,
        monthly=monthly,
    )
