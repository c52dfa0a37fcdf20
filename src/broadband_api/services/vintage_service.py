"""Vintage service — release bookkeeping, raw-row loading, and atomic activation.

Activation flips the ``is_active`` flag and rebuilds the ``block_availability``
materialized view in one transaction, so a concurrent reader sees either the
previous release's aggregate or the new one.
"""

import re
from datetime import UTC, datetime
from pathlib import Path
from zipfile import BadZipFile

import asyncpg
from loguru import logger
from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.bdc import AcquiredFile, PipelineError
from broadband_api.lib.ingest import ingest_archive
from broadband_api.models.availability_record import AvailabilityRecord
from broadband_api.models.block_availability import AGGREGATE_VIEW_NAME, aggregate_view_create
from broadband_api.models.data_vintage import DataVintage

RELEASE_ID_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_release_id(release: str) -> str:
    """Check that a release id is an ISO date (``YYYY-MM-DD``).

    Raises:
        ValueError: If the id is malformed.
    """
    if not RELEASE_ID_RE.match(release):
        msg = f"Invalid release id {release!r}: expected YYYY-MM-DD"
        raise ValueError(msg)
    return release


def aggregate_view_ddl(release: str) -> list[str]:
    """SQL statements that drop and rebuild the aggregate view for a release."""
    validate_release_id(release)
    return [f"DROP MATERIALIZED VIEW IF EXISTS {AGGREGATE_VIEW_NAME}", *aggregate_view_create(f"'{release}'")]


def _insert_for(session: AsyncSession):  # noqa: ANN202
    return sqlite_insert if session.get_bind().dialect.name == "sqlite" else pg_insert


async def mark_import_started(session: AsyncSession, release: str) -> None:
    """Create the release row if absent, or stamp a new import start on it."""
    validate_release_id(release)
    now = datetime.now(UTC)
    stmt = (
        _insert_for(session)(DataVintage)
        .values(
            vintage_id=release,
            description=f"FCC BDC availability release {release}",
            discovered_at=now,
            import_started_at=now,
            is_active=False,
        )
        .on_conflict_do_update(index_elements=["vintage_id"], set_={"import_started_at": now})
    )
    await session.execute(stmt)
    await session.commit()
    logger.info("Release {} marked as import started", release)


async def purge_region(session: AsyncSession, release: str, region: str) -> int:
    """Delete raw rows previously loaded for a (release, region) pair. The caller commits."""
    result = await session.execute(
        delete(AvailabilityRecord).where(
            AvailabilityRecord.data_vintage == release,
            AvailabilityRecord.state_fips == region,
        )
    )
    if result.rowcount:
        logger.info("Removed {:,} existing rows for release {} region {}", result.rowcount, release, region)
    return result.rowcount or 0


async def load_region(session: AsyncSession, release: str, region: str, paths: list[Path]) -> int:
    """Replace a region's raw rows for a release with the contents of its archives.

    Existing rows for the pair are deleted first, so re-running a release
    never duplicates data. Each archive loads inside a savepoint; an archive
    that cannot be read, or whose COPY the server rejects, is logged and
    skipped without losing the others.

    Returns:
        Rows loaded across all archives.
    """
    await purge_region(session, release, region)

    total = 0
    for path in paths:
        try:
            async with session.begin_nested():
                result = await ingest_archive(session, path, release, region)
        except (BadZipFile, ValueError, OSError, DBAPIError, asyncpg.PostgresError) as e:
            logger.error(f"Failed to ingest {path.name}: {e}")
            continue
        total += result.rows_loaded

    await session.commit()
    logger.info("Region {}: {:,} rows loaded from {} file(s)", region, total, len(paths))
    return total


async def load_files(session: AsyncSession, release: str, files: list[AcquiredFile]) -> dict[str, int]:
    """Load acquired archives grouped by region, preserving region order.

    Returns:
        Rows loaded per region.
    """
    by_region: dict[str, list[Path]] = {}
    for f in files:
        by_region.setdefault(f.region, []).append(f.path)

    return {region: await load_region(session, release, region, paths) for region, paths in by_region.items()}


async def count_release_rows(session: AsyncSession, release: str) -> int:
    """Number of raw rows stored for a release."""
    result = await session.execute(
        select(func.count()).select_from(AvailabilityRecord).where(AvailabilityRecord.data_vintage == release)
    )
    return int(result.scalar_one())


async def activate_vintage(session: AsyncSession, release: str, record_count: int, regions: list[str]) -> None:
    """Make a release the active one and rebuild the aggregate view for it.

    Deactivation, activation, and the view rebuild commit together; on any
    failure the transaction rolls back and the previous release stays active.
    """
    validate_release_id(release)
    now = datetime.now(UTC)
    try:
        await session.execute(update(DataVintage).where(DataVintage.is_active.is_(True)).values(is_active=False))
        stmt = (
            _insert_for(session)(DataVintage)
            .values(
                vintage_id=release,
                description=f"FCC BDC availability release {release}",
                record_count=record_count,
                states_imported=regions,
                import_completed_at=now,
                is_active=True,
            )
            .on_conflict_do_update(
                index_elements=["vintage_id"],
                set_={
                    "record_count": record_count,
                    "states_imported": regions,
                    "import_completed_at": now,
                    "is_active": True,
                },
            )
        )
        await session.execute(stmt)

        logger.info("Rebuilding aggregate view for release {}", release)
        for statement in aggregate_view_ddl(release):
            await session.execute(text(statement))
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info("Release {} is now active ({:,} rows, regions {})", release, record_count, ",".join(regions))


async def resume_activation(session: AsyncSession, release: str, regions: list[str]) -> int:
    """Activate a release whose rows are already loaded.

    Recovers a run that failed after ingestion but before activation.

    Returns:
        Row count recorded on the release.

    Raises:
        PipelineError: If no rows are stored for the release.
    """
    validate_release_id(release)
    count = await count_release_rows(session, release)
    if count == 0:
        msg = f"No rows found for release {release}; nothing to activate"
        raise PipelineError(msg)
    logger.info("Found {:,} rows for release {}", count, release)
    await activate_vintage(session, release, count, regions)
    return count
