"""Fixtures backed by an in-memory SQLite database (aiosqlite).

StaticPool keeps a single connection alive so every session in a test sees
the same in-memory database.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import src.infrastructure.persistence  # noqa: F401 — registers all mappers
from src.infrastructure.database import Base
from src.infrastructure.persistence.repositories.users import SqlUserRepository


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def users(session) -> SqlUserRepository:
    return SqlUserRepository(session)


@pytest.fixture
async def fresh_users(session_factory):
    """Open a repository on a brand-new session (empty identity map)."""
    sessions: list[AsyncSession] = []

    def _make() -> SqlUserRepository:
        session = session_factory()
        sessions.append(session)
        return SqlUserRepository(session)

    yield _make
    for session in sessions:
        await session.close()
