"""
Create all MyCSD tables on the configured database.

Usage:
    python -m app.db.init_db
"""
import asyncio

# Import all models so they are registered on Base.metadata
from app.auth.models import StudentProfile, User  # noqa: F401
from app.core.models import (  # noqa: F401
    Event,
    EventProposal,
    MyCSDAuditLog,
    MyCSDLog,
    MyCSDRecord,
    MyCSDRequest,
    Notification,
    Organization,
    Registration,
)
from app.db.session import Base, engine


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    await init_db()
    await engine.dispose()
    print("MyCSD tables created.")


if __name__ == "__main__":
    asyncio.run(main())
