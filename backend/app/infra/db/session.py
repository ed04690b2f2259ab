"""Engine and session factory."""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.infra.db.base import async_connect_args, normalize_async_url, url_without_sslmode
from app.settings import settings

_db_url = normalize_async_url(settings.database_url)

engine = create_async_engine(
    url_without_sslmode(_db_url),
    connect_args=async_connect_args(_db_url),
    echo=settings.database_echo,
    pool_pre_ping=not _db_url.startswith("sqlite"),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit once on success; roll back every write of the block on any error."""
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
