import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from datetime import date
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.auth.models import StudentProfile, User
from app.auth.schemas import CurrentUser
from app.auth.security import create_access_token
from app.core.enums import AttendanceStatus, EventStatus, UserRole
from app.core.models import Event, EventProposal, Organization, Registration
from app.db.session import Base, get_db


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; overrides the FastAPI dependency."""
    # StaticPool keeps a single connection so every session sees the same in-memory DB
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def as_current_user(user: User, matric_num: Optional[str] = None) -> CurrentUser:
    return CurrentUser(
        id=user.id,
        role=user.role,
        organization_id=user.organization_id,
        matric_num=matric_num,
    )


def auth_headers(user: User) -> dict:
    token = create_access_token(subject={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


class Factory:
    """Builds committed rows for tests."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def organization(self, name: str = "Kelab Robotik") -> Organization:
        org = Organization(name=name)
        self.db.add(org)
        await self.db.commit()
        return org

    async def user(
        self,
        role: UserRole = UserRole.STUDENT,
        organization: Optional[Organization] = None,
        matric_num: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        n = self._next()
        user = User(
            full_name=name or f"User {n}",
            email=f"user{n}@student.usm.my",
            role=role.value,
            organization_id=organization.id if organization else None,
        )
        self.db.add(user)
        await self.db.flush()
        if matric_num is not None:
            self.db.add(StudentProfile(user_id=user.id, matric_num=matric_num))
        await self.db.commit()
        return user

    async def admin(self) -> User:
        return await self.user(UserRole.ADMIN, name="Admin HEP")

    async def organizer(self, organization: Optional[Organization] = None) -> User:
        return await self.user(UserRole.ORGANIZER, organization=organization, name="Organizer")

    async def event(
        self,
        owner: User,
        title: str = "Hackathon Inovasi",
        level: Optional[str] = None,
        category: Optional[str] = None,
        status: EventStatus = EventStatus.COMPLETED,
        event_date: Optional[date] = None,
    ) -> Event:
        proposal = EventProposal(user_id=owner.id, organization_id=owner.organization_id, title=title)
        self.db.add(proposal)
        await self.db.flush()
        event = Event(
            proposal_id=proposal.id,
            title=title,
            status=status.value,
            mycsd_level=level,
            mycsd_category=category,
            event_date=event_date,
        )
        self.db.add(event)
        await self.db.commit()
        return event

    async def register(
        self,
        event: Event,
        student: User,
        attendance: AttendanceStatus = AttendanceStatus.PRESENT,
    ) -> Registration:
        reg = Registration(event_id=event.id, user_id=student.id, attendance=attendance.value)
        self.db.add(reg)
        await self.db.commit()
        return reg


@pytest.fixture()
def factory(db_session: AsyncSession) -> Factory:
    return Factory(db_session)
