"""Availability store queries — aggregate view by H3 cell or Census block, and the active release."""

from loguru import logger
from sqlalchemy import Column, select
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.availability import ProviderAvailability, collapse_observations
from broadband_api.models.block_availability import block_availability
from broadband_api.models.data_vintage import DataVintage


async def _query_view(session: AsyncSession, column: Column, value: str) -> list[ProviderAvailability]:
    """Select aggregate rows matching ``column == value`` and collapse them.

    The view is dropped and recreated during activation; a missing view is
    reported as no data.
    """
    view = block_availability
    query = select(
        view.c.provider_id,
        view.c.provider_name,
        view.c.technology_code,
        view.c.max_download_speed,
        view.c.max_upload_speed,
        view.c.low_latency,
    ).where(column == value)

    try:
        result = await session.execute(query)
    except (ProgrammingError, OperationalError) as e:
        logger.warning(f"Aggregate view query failed ({column.name}={value}): {e.orig!r}")
        await session.rollback()
        return []

    return collapse_observations(
        ProviderAvailability(
            provider_id=row.provider_id,
            provider_name=row.provider_name,
            technology_code=int(row.technology_code),
            max_download_speed=float(row.max_download_speed),
            max_upload_speed=float(row.max_upload_speed),
            low_latency=bool(row.low_latency),
        )
        for row in result
    )


async def query_by_cell(session: AsyncSession, cell_id: str) -> list[ProviderAvailability]:
    """Providers available anywhere in an H3 resolution-8 cell."""
    return await _query_view(session, block_availability.c.h3_res8_id, cell_id)


async def query_by_block(session: AsyncSession, block_geoid: str) -> list[ProviderAvailability]:
    """Providers available in a Census block."""
    return await _query_view(session, block_availability.c.block_geoid, block_geoid)


async def get_active_vintage(session: AsyncSession) -> DataVintage | None:
    """Return the active release row, or None before the first activation."""
    result = await session.execute(
        select(DataVintage)
        .where(DataVintage.is_active.is_(True))
        .order_by(DataVintage.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
