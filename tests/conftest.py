"""Shared test fixtures for async database and sessions."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from broadband_api.core.config import Settings
from broadband_api.lib.spatial import cell_for
from broadband_api.models import view_metadata
from broadband_api.models.base import Base
from tests.helpers import SAMPLE_LAT, SAMPLE_LNG


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        bdc_rate_limit_delay=0,
        bdc_backoff_base=0,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine with all tables and the aggregate view table."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(view_metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def sample_cell() -> str:
    """H3 cell of the sample York County, SC location."""
    return cell_for(SAMPLE_LAT, SAMPLE_LNG)
