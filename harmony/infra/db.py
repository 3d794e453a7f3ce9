"""
Database infrastructure

Async SQLAlchemy engine, session factory and the FastAPI session dependency.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from harmony.core.config import settings
from harmony.core.logging import get_logger

logger = get_logger(__name__)


def _engine_options() -> dict:
    options = {"echo": settings.db_echo, "future": True}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session per request and close it afterwards.
    Uncommitted work is rolled back on close.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def close_db_connection() -> None:
    await engine.dispose()
    logger.info("db.closed")
