"""E2E test fixtures: a real, migrated PostgreSQL database.

These tests run only when ``DATABASE_URL`` points at PostgreSQL. The CI
workflow runs ``alembic upgrade head`` before pytest, so the tables and the
``block_availability`` view already exist. Each test works on its own
release id and puts the previously active release back afterwards.
"""

import os
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy import delete, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.core.config import get_settings
from broadband_api.core.database import dispose_engine, get_session_factory, init_engine
from broadband_api.models import AvailabilityRecord, DataVintage
from broadband_api.models.block_availability import AGGREGATE_VIEW_NAME, aggregate_view_create

E2E_RELEASE = "2000-01-01"
ACTIVE_RELEASE = "(SELECT vintage_id FROM data_vintages WHERE is_active LIMIT 1)"

requires_postgres = pytest.mark.skipif(
    not os.environ.get("DATABASE_URL", "").startswith("postgresql"),
    reason="requires a migrated PostgreSQL database",
)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession]:
    """Session on the live database; removes the e2e release and restores the active one on exit."""
    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)
    try:
        async with get_session_factory()() as session:
            previous = (
                await session.execute(select(DataVintage.vintage_id).where(DataVintage.is_active.is_(True)))
            ).scalar_one_or_none()

            yield session

            await session.rollback()
            await session.execute(delete(AvailabilityRecord).where(AvailabilityRecord.data_vintage == E2E_RELEASE))
            await session.execute(delete(DataVintage).where(DataVintage.vintage_id == E2E_RELEASE))
            if previous is not None:
                await session.execute(
                    update(DataVintage).where(DataVintage.vintage_id == previous).values(is_active=True)
                )
            await session.execute(text(f"DROP MATERIALIZED VIEW IF EXISTS {AGGREGATE_VIEW_NAME}"))
            for statement in aggregate_view_create(ACTIVE_RELEASE):
                await session.execute(text(statement))
            await session.commit()
    finally:
        await dispose_engine()
