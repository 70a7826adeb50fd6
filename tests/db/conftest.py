from typing import Any, AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from payment_intake.config import settings
from payment_intake.db.db import drop_models, init_db


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, Any]:
    """In-memory database shared by every session of a single test."""
    engine = create_async_engine(
        settings.test_database_url,
        echo=False,
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await drop_models(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def async_session(session_maker) -> AsyncGenerator[AsyncSession, Any]:
    async with session_maker() as session:
        yield session
