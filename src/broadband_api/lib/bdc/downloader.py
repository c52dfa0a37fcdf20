"""Rate-limited, resumable downloads of BDC release files.

Each file is streamed to a ``.part`` temporary file that is renamed on
success, so an interrupted run never leaves a truncated archive under its
final name. Files already present with a plausible size are reused.
"""

from __future__ import annotations

from pathlib import Path

import httpx
from loguru import logger

from broadband_api.lib.bdc.catalog import select_technology_files
from broadband_api.lib.bdc.client import BdcClient
from broadband_api.lib.bdc.retry import RequestPacer, retry_with_backoff
from broadband_api.lib.bdc.types import AcquiredFile, BdcFileEntry, DownloadResult

# Compressed CSV rows are never smaller than this.
MIN_BYTES_PER_RECORD = 5


def resolve_download_path(entry: BdcFileEntry, download_dir: Path) -> Path:
    """Return ``download_dir/<file_name>.zip`` for a catalog entry."""
    return download_dir / f"{entry.file_name}.zip"


def minimum_expected_size(entry: BdcFileEntry) -> int:
    """Smallest size in bytes a complete copy of ``entry`` can have."""
    return max(entry.record_count * MIN_BYTES_PER_RECORD, 1)


def is_already_downloaded(dest: Path, entry: BdcFileEntry) -> bool:
    """Check whether a local copy exists and is at least the expected floor size."""
    if not dest.is_file():
        return False
    return dest.stat().st_size >= minimum_expected_size(entry)


async def download_file(
    client: BdcClient,
    entry: BdcFileEntry,
    dest: Path,
    *,
    pacer: RequestPacer,
    attempts: int = 3,
    backoff_base: float = 10.0,
    timeout: float = 600.0,
) -> DownloadResult:
    """Download one catalog file with retries, pacing, and partial-file cleanup.

    Args:
        client: BDC API client.
        entry: Catalog entry to fetch.
        dest: Final local path.
        pacer: Shared pacer enforcing the minimum delay between request starts.
        attempts: Maximum attempts.
        backoff_base: Delay after the first failed attempt (doubles each time).
        timeout: Per-attempt timeout in seconds.

    Returns:
        A DownloadResult; ``error`` is set when every attempt failed.
    """
    result = DownloadResult(entry=entry)

    if is_already_downloaded(dest, entry):
        logger.info("Already downloaded: {}", dest.name)
        result.local_path = dest
        return result

    dest.parent.mkdir(parents=True, exist_ok=True)
    part_path = dest.with_suffix(dest.suffix + ".part")

    async def attempt() -> int:
        result.attempts += 1
        await pacer.wait()
        logger.info(f"Downloading {entry.file_name} (attempt {result.attempts}/{attempts})")
        try:
            return await client.download_to(entry, part_path)
        except BaseException:
            part_path.unlink(missing_ok=True)
            raise

    try:
        size = await retry_with_backoff(
            attempt,
            attempts=attempts,
            base_delay=backoff_base,
            timeout=timeout,
            retry_on=(httpx.HTTPError, OSError),
            description=f"Download of {entry.file_name}",
        )
    except (httpx.HTTPError, OSError, TimeoutError) as exc:
        part_path.unlink(missing_ok=True)
        result.error = f"Download failed for {entry.file_name}: {exc!r}"
        logger.error(result.error)
        return result

    part_path.rename(dest)
    result.downloaded = True
    result.local_path = dest
    logger.info("Downloaded: {} ({:.1f} MB)", dest.name, size / 1024 / 1024)
    return result


async def acquire_release_files(
    client: BdcClient,
    release: str,
    regions: list[str],
    download_dir: Path,
    *,
    rate_limit_delay: float = 6.5,
    attempts: int = 3,
    backoff_base: float = 10.0,
    timeout: float = 600.0,
) -> list[AcquiredFile]:
    """Acquire every per-technology file of a release for the given regions.

    The catalog is fetched once per release and filtered client-side. Regions
    with no matching files are logged and skipped; files that fail every
    attempt are logged and left out of the result.

    Args:
        client: BDC API client.
        release: Release id, e.g. "2025-06-30".
        regions: Two-digit state FIPS codes.
        download_dir: Root download directory; files go under ``download_dir/release``.
        rate_limit_delay: Minimum seconds between consecutive download starts.
        attempts: Maximum attempts per file.
        backoff_base: Initial retry delay in seconds.
        timeout: Per-attempt timeout in seconds.

    Returns:
        Successfully acquired files, in region then catalog order.

    Raises:
        BdcApiError: If the file catalog cannot be fetched.
    """
    catalog = await client.list_availability_files(release)
    pacer = RequestPacer(rate_limit_delay)
    release_dir = download_dir / release
    acquired: list[AcquiredFile] = []

    for region in regions:
        entries = select_technology_files(catalog, region)
        if not entries:
            logger.warning("No technology files found for region {} in release {}; skipping", region, release)
            continue
        logger.info("Region {}: {} technology files", region, len(entries))

        for entry in entries:
            dest = resolve_download_path(entry, release_dir)
            result = await download_file(
                client,
                entry,
                dest,
                pacer=pacer,
                attempts=attempts,
                backoff_base=backoff_base,
                timeout=timeout,
            )
            if result.success and result.local_path is not None:
                acquired.append(AcquiredFile(path=result.local_path, region=region))

    logger.info("Acquired {} files for release {}", len(acquired), release)
    return acquired
