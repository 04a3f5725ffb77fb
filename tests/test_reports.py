from datetime import date, datetime

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.mycsd import service as mycsd_service
from app.api.v1.mycsd.schemas import ClaimSubmit
from app.api.v1.reports import service
from app.core.enums import MyCSDCategory, MyCSDLevel, UserRole
from app.core.models import MyCSDLog

from conftest import as_current_user


TODAY = date(2026, 10, 19)


async def _award(db: AsyncSession, factory, admin, students, level, category, event_date, title="Program"):
    organizer = await factory.organizer()
    event = await factory.event(organizer, title=title, event_date=event_date)
    claim = await mycsd_service.submit_claim(
        db,
        ClaimSubmit(event_id=event.id, document_url="lk.pdf", level=level, category=category),
        as_current_user(organizer),
    )
    for s in students:
        await factory.register(event, s)
    return await mycsd_service.approve_claim(db, claim.id, as_current_user(admin))


@pytest.mark.asyncio
async def test_summary_without_points_has_every_bucket(db_session: AsyncSession) -> None:
    summary = await service.summarize(db_session, "999999", today=TODAY)

    assert summary.total_points == 0
    assert summary.total_events == 0
    assert summary.events_this_month == 0
    assert summary.points_this_month == 0
    assert set(summary.points_by_category) == {c.value for c in MyCSDCategory}
    assert set(summary.points_by_level) == {lvl.value for lvl in MyCSDLevel}
    assert len(summary.points_by_category) == 5
    assert len(summary.points_by_level) == 3
    assert all(v == 0 for v in summary.points_by_category.values())
    assert all(v == 0 for v in summary.points_by_level.values())


@pytest.mark.asyncio
async def test_summary_for_user_without_matric(db_session: AsyncSession, factory) -> None:
    student = await factory.user(UserRole.STUDENT)

    summary = await service.summarize_for_user(db_session, as_current_user(student), today=TODAY)

    assert summary.matric_no is None
    assert summary.total_points == 0
    assert len(summary.points_by_category) == 5


@pytest.mark.asyncio
async def test_summary_totals_and_breakdowns(db_session: AsyncSession, factory) -> None:
    admin = await factory.admin()
    student = await factory.user(UserRole.STUDENT, matric_num="150123")
    other = await factory.user(UserRole.STUDENT, matric_num="150999")

    await _award(db_session, factory, admin, [student, other], "Antarabangsa", "KEBUDAYAAN", date(2026, 10, 2))
    await _award(db_session, factory, admin, [student], "Negeri / Universiti", "KEPIMPINAN", date(2026, 9, 14))
    await _award(db_session, factory, admin, [student], "Kelab", "KEPIMPINAN", date(2026, 10, 11))

    summary = await service.summarize_for_user(db_session, as_current_user(student), today=TODAY)

    assert summary.matric_no == "150123"
    assert summary.total_points == 8 + 4 + 2
    assert summary.total_events == 3
    assert summary.points_by_category["KEBUDAYAAN"] == 8
    assert summary.points_by_category["KEPIMPINAN"] == 6
    assert summary.points_by_category["KEUSAHAWANAN"] == 0
    assert summary.points_by_level["Antarabangsa"] == 8
    assert summary.points_by_level["Kebangsaan / Antara University"] == 4
    assert summary.points_by_level["Kampus"] == 2
    assert summary.events_this_month == 2
    assert summary.points_this_month == 10

    other_summary = await service.summarize(db_session, "150999", today=TODAY)
    assert other_summary.total_points == 8


@pytest.mark.asyncio
async def test_student_records_list(db_session: AsyncSession, factory) -> None:
    admin = await factory.admin()
    student = await factory.user(UserRole.STUDENT, matric_num="151000")
    await _award(db_session, factory, admin, [student], "Negeri", "KEUSAHAWANAN", date(2026, 8, 1), title="Bazaar Usahawan")

    records = await service.list_student_records(db_session, "151000")

    assert len(records) == 1
    item = records[0]
    assert item.event_name == "Bazaar Usahawan"
    assert item.points == 4
    assert item.category == "KEUSAHAWANAN"
    assert item.level == "Kebangsaan / Antara University"
    assert item.position == "Participant"
    assert item.organization_name == "Unknown Organization"
    assert await service.list_student_records(db_session, None) == []


@pytest.mark.asyncio
async def test_admin_overview(db_session: AsyncSession, factory) -> None:
    admin = await factory.admin()
    s1 = await factory.user(UserRole.STUDENT, matric_num="152001")
    s2 = await factory.user(UserRole.STUDENT, matric_num="152002")

    first = await _award(db_session, factory, admin, [s1, s2], "Antarabangsa", "KEBUDAYAAN", date(2026, 9, 5))
    await _award(db_session, factory, admin, [s1], "Kampus", "KEPIMPINAN", date(2026, 10, 5))

    # Place the first award in September
    await db_session.execute(
        update(MyCSDLog).where(MyCSDLog.record_id == first.record_id).values(created_at=datetime(2026, 9, 6, 10, 0))
    )
    await db_session.execute(
        update(MyCSDLog).where(MyCSDLog.record_id != first.record_id).values(created_at=datetime(2026, 10, 6, 10, 0))
    )
    await db_session.commit()

    # A pending claim too
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    await mycsd_service.submit_claim(
        db_session,
        ClaimSubmit(event_id=event.id, document_url="lk.pdf", level="Kampus", category="KEBUDAYAAN"),
        as_current_user(organizer),
    )

    overview = await service.admin_overview(db_session, months=3, today=TODAY)

    assert overview.claims_by_status == {"pending": 1, "approved": 2, "rejected": 0}
    assert overview.total_points_awarded == 8 * 2 + 2
    assert overview.total_distributions == 3
    assert overview.points_by_category["KEBUDAYAAN"] == 16
    assert overview.points_by_category["KEPIMPINAN"] == 2
    assert overview.points_by_category["SUKAN/REKREASI/SOSIALISASI"] == 0
    assert overview.points_by_level == {"Antarabangsa": 16, "Kebangsaan / Antara University": 0, "Kampus": 2}

    months = [(m.month, m.points, m.delta) for m in overview.monthly]
    assert months == [("2026-08", 0, 0), ("2026-09", 16, 16), ("2026-10", 2, -14)]

    logs = (await db_session.execute(select(MyCSDLog))).scalars().all()
    assert len(logs) == 3
