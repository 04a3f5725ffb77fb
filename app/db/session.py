from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings per backend. SQLite (tests, local runs) has no server side to go stale."""
    if database_url.startswith("sqlite"):
        return {"echo": False, "future": True}
    # pool_pre_ping: Supabase/Postgres drops idle connections; check before use.
    # pool_recycle: discard connections older than 5 minutes.
    return {"echo": False, "future": True, "pool_pre_ping": True, "pool_recycle": 300}


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
