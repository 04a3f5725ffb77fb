import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.events import service
from app.api.v1.events.schemas import EventMyCSDUpdate
from app.api.v1.mycsd import service as mycsd_service
from app.api.v1.mycsd.schemas import ClaimSubmit
from app.core.enums import EventStatus, UserRole
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError

from conftest import as_current_user


@pytest.mark.asyncio
async def test_organization_member_can_edit_draft(db_session: AsyncSession, factory) -> None:
    org = await factory.organization()
    owner = await factory.organizer(org)
    colleague = await factory.organizer(org)
    event = await factory.event(owner, status=EventStatus.DRAFT)

    resp = await service.update_event_mycsd(
        db_session,
        event.id,
        EventMyCSDUpdate(level="Antarabangsa", category="kepimpinan", has_mycsd=True),
        as_current_user(colleague),
    )
    assert resp.level == "Antarabangsa"
    assert resp.category == "KEPIMPINAN"
    assert resp.has_mycsd is True
    assert resp.points == 8


@pytest.mark.asyncio
async def test_outsider_cannot_edit(db_session: AsyncSession, factory) -> None:
    owner = await factory.organizer(await factory.organization("Kelab A"))
    outsider = await factory.organizer(await factory.organization("Kelab B"))
    student = await factory.user(UserRole.STUDENT)
    event = await factory.event(owner, status=EventStatus.DRAFT)

    with pytest.raises(ForbiddenError):
        await service.update_event_mycsd(db_session, event.id, EventMyCSDUpdate(level="Negeri"), as_current_user(outsider))
    with pytest.raises(ForbiddenError):
        await service.update_event_mycsd(db_session, event.id, EventMyCSDUpdate(level="Negeri"), as_current_user(student))


@pytest.mark.asyncio
async def test_invalid_values(db_session: AsyncSession, factory) -> None:
    admin = as_current_user(await factory.admin())
    event = await factory.event(await factory.organizer())

    with pytest.raises(ValidationError):
        await service.update_event_mycsd(db_session, event.id, EventMyCSDUpdate(category="Akademik"), admin)
    with pytest.raises(ValidationError):
        await service.update_event_mycsd(db_session, event.id, EventMyCSDUpdate(level="   "), admin)
    with pytest.raises(NotFoundError):
        await service.get_event_mycsd(db_session, admin.id)


@pytest.mark.asyncio
async def test_claimed_event_reports_frozen_points(db_session: AsyncSession, factory) -> None:
    admin = await factory.admin()
    admin_user = as_current_user(admin)
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    claim = await mycsd_service.submit_claim(
        db_session,
        ClaimSubmit(event_id=event.id, document_url="lk.pdf", level="Antarabangsa", category="KEBUDAYAAN"),
        as_current_user(organizer),
    )
    await mycsd_service.approve_claim(db_session, claim.id, admin_user)

    # Relabelling after approval changes the label but not the awarded points
    resp = await service.update_event_mycsd(db_session, event.id, EventMyCSDUpdate(level="Kampus"), admin_user)
    assert resp.is_mycsd_claimed is True
    assert resp.level == "Kampus"
    assert resp.points == 8
