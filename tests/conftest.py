from collections.abc import AsyncIterator
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from koine_srs.database import create_engine, init_db, session_factory
from koine_srs.srs.scheduler import Scheduler
from koine_srs.store import CardStore

NOW = datetime(2024, 1, 15, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """A session on a fresh in-memory database."""
    engine = create_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    async with session_factory(engine)() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def store(db: AsyncSession, scheduler: Scheduler) -> CardStore:
    return CardStore(db, scheduler)
