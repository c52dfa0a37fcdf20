"""Pipeline service — the batch run from release discovery to activation.

A run is exclusive and sequential: discover → acquire (rate-limited) →
load per region → activate. Any hard fault raises PipelineError or
BdcApiError before activation, leaving the previously active release serving.
"""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.bdc import BdcClient, PipelineError, acquire_release_files, list_available_vintages
from broadband_api.services.vintage_service import (
    activate_vintage,
    count_release_rows,
    load_files,
    mark_import_started,
    validate_release_id,
)


@dataclass
class PipelineReport:
    """Summary of a completed pipeline run."""

    release: str
    files_acquired: int = 0
    rows_by_region: dict[str, int] = field(default_factory=dict)
    record_count: int = 0

    @property
    def rows_loaded(self) -> int:
        return sum(self.rows_by_region.values())


async def latest_release(client: BdcClient) -> str:
    """Return the newest availability release id.

    Raises:
        BdcApiError: If the release listing call fails.
        PipelineError: If the listing has no availability releases.
    """
    vintages = await list_available_vintages(client)
    if not vintages:
        msg = "No availability releases found in the BDC catalog"
        raise PipelineError(msg)
    logger.info("Available releases: {}", ", ".join(vintages[:5]))
    return vintages[0]


async def run_pipeline(
    session: AsyncSession,
    client: BdcClient,
    regions: list[str],
    download_dir: Path,
    *,
    release: str | None = None,
    rate_limit_delay: float = 6.5,
    download_attempts: int = 3,
    backoff_base: float = 10.0,
    download_timeout: float = 600.0,
) -> PipelineReport:
    """Import a release for the given regions and make it active.

    Args:
        session: Database session used for every step.
        client: BDC API client.
        regions: Two-digit state FIPS codes to import.
        download_dir: Root directory for downloaded archives.
        release: Release to import; defaults to the newest available.
        rate_limit_delay: Minimum seconds between download starts.
        download_attempts: Attempts per file.
        backoff_base: Initial retry delay in seconds.
        download_timeout: Per-attempt download timeout in seconds.

    Returns:
        PipelineReport for the activated release.

    Raises:
        BdcApiError: If the BDC catalog cannot be fetched.
        PipelineError: If no files were acquired or no rows were loaded.
    """
    if not regions:
        msg = "No regions configured for the pipeline"
        raise PipelineError(msg)

    if release is None:
        release = await latest_release(client)
    validate_release_id(release)
    logger.info("Pipeline starting for release {} (regions {})", release, ",".join(regions))

    await mark_import_started(session, release)

    files = await acquire_release_files(
        client,
        release,
        regions,
        download_dir,
        rate_limit_delay=rate_limit_delay,
        attempts=download_attempts,
        backoff_base=backoff_base,
        timeout=download_timeout,
    )
    if not files:
        msg = f"No files acquired for release {release}"
        raise PipelineError(msg)

    report = PipelineReport(release=release, files_acquired=len(files))
    report.rows_by_region = await load_files(session, release, files)
    if report.rows_loaded == 0:
        msg = f"No rows loaded for release {release}"
        raise PipelineError(msg)

    report.record_count = await count_release_rows(session, release)
    loaded_regions = [r for r, rows in report.rows_by_region.items() if rows > 0]
    await activate_vintage(session, release, report.record_count, loaded_regions)

    logger.info(
        "Pipeline complete: release {} active with {:,} rows from {} file(s)",
        release,
        report.record_count,
        report.files_acquired,
    )
    return report
