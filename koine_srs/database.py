"""Database engine and session management."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from koine_srs.config import settings
from koine_srs.models import Base


def create_engine(url: str | None = None, **kwargs: Any) -> AsyncEngine:
    """Create an async engine, by default for the configured database."""
    return create_async_engine(url or settings.database_url, echo=settings.debug, **kwargs)


def session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose sessions keep loaded cards usable after commit."""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


async def init_db(bind: AsyncEngine) -> None:
    """Create tables if they don't exist."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
