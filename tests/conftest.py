"""Shared test fixtures."""

import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

# Point the app's global engine at a throwaway database before it is imported
_TEST_DB = Path(tempfile.mkdtemp(prefix="scuba-log-tests-")) / "dives.db"
os.environ["SCUBA_LOG_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from scuba_log_server.models.base import Base  # noqa: E402
from scuba_log_server.services.interchange import InterchangeService  # noqa: E402
from scuba_log_server.services.repository import SqlDiveRepository  # noqa: E402
from tests.fixtures.dives import fixed_clock  # noqa: E402


@pytest.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create async session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def repository(async_session: AsyncSession) -> SqlDiveRepository:
    return SqlDiveRepository(async_session)


@pytest.fixture
def service(repository: SqlDiveRepository) -> InterchangeService:
    """Interchange service with a fixed clock."""
    return InterchangeService(repository, clock=fixed_clock)


@pytest.fixture
async def app_database() -> AsyncIterator[None]:
    """Reset the tables behind the application's global engine."""
    from scuba_log_server.core.database import engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()

    yield

    await engine.dispose()
