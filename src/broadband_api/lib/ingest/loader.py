"""Bulk loading of normalized availability rows via PostgreSQL COPY."""

from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.ingest.parser import DEFAULT_CHUNK_SIZE, AvailabilityRow, iter_archive_rows
from broadband_api.models.availability_record import COPY_COLUMNS

AVAILABILITY_TABLE = "broadband_availability"
PROGRESS_INTERVAL = 100_000


@dataclass
class IngestResult:
    """Outcome of loading one archive."""

    path: Path
    region: str
    rows_loaded: int = 0


class _ProgressCounter:
    """Re-yields rows asynchronously while counting and logging progress."""

    def __init__(self, rows: Iterable[AvailabilityRow], label: str) -> None:
        self._rows = rows
        self._label = label
        self.count = 0

    async def stream(self) -> AsyncIterator[AvailabilityRow]:
        for row in self._rows:
            self.count += 1
            if self.count % PROGRESS_INTERVAL == 0:
                logger.info("{}: {:,} rows streamed", self._label, self.count)
            yield row


async def copy_rows(session: AsyncSession, rows: Iterable[AvailabilityRow], label: str = "COPY") -> int:
    """Stream rows into ``broadband_availability`` with a single COPY.

    Uses the asyncpg driver connection underlying the session, so the COPY
    joins the session's current transaction.

    Returns:
        Number of rows sent.
    """
    connection = await session.connection()
    raw = await connection.get_raw_connection()
    driver = raw.driver_connection

    counter = _ProgressCounter(rows, label)
    await driver.copy_records_to_table(
        AVAILABILITY_TABLE,
        records=counter.stream(),
        columns=list(COPY_COLUMNS),
    )
    return counter.count


async def ingest_archive(
    session: AsyncSession,
    zip_path: Path,
    release: str,
    region: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> IngestResult:
    """Parse an archive and bulk-load its rows tagged with release and region.

    The caller commits.
    """
    rows = iter_archive_rows(zip_path, release, region, chunk_size=chunk_size)
    loaded = await copy_rows(session, rows, label=zip_path.name)
    logger.info("Loaded {:,} rows from {}", loaded, zip_path.name)
    return IngestResult(path=zip_path, region=region, rows_loaded=loaded)
