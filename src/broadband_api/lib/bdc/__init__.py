"""BDC library — FCC Broadband Data Collection release discovery and file acquisition.

Public API:
    - BdcClient: Listing and download client for the BDC public API
    - list_available_vintages: Availability release ids, newest first
    - select_technology_files: Client-side catalog filtering per region
    - region_from_filename: State FIPS code parsed from a BDC file name
    - acquire_release_files: Rate-limited, resumable download of a release
    - retry_with_backoff / RequestPacer: Generic retry and pacing utilities
    - BdcFileEntry, AcquiredFile, DownloadResult: Data types
    - BdcApiError, PipelineError: Error types
"""

from broadband_api.lib.bdc.catalog import (
    TECH_FILE_KEYWORDS,
    is_technology_file,
    list_available_vintages,
    region_from_filename,
    select_technology_files,
)
from broadband_api.lib.bdc.client import BDC_BASE_URL, BdcClient
from broadband_api.lib.bdc.downloader import (
    acquire_release_files,
    download_file,
    is_already_downloaded,
    minimum_expected_size,
    resolve_download_path,
)
from broadband_api.lib.bdc.retry import RequestPacer, backoff_schedule, retry_with_backoff
from broadband_api.lib.bdc.types import (
    AcquiredFile,
    AsOfDate,
    BdcApiError,
    BdcFileEntry,
    DownloadResult,
    PipelineError,
)

__all__ = [
    "BDC_BASE_URL",
    "TECH_FILE_KEYWORDS",
    "AcquiredFile",
    "AsOfDate",
    "BdcApiError",
    "BdcClient",
    "BdcFileEntry",
    "DownloadResult",
    "PipelineError",
    "RequestPacer",
    "acquire_release_files",
    "backoff_schedule",
    "download_file",
    "is_already_downloaded",
    "is_technology_file",
    "list_available_vintages",
    "minimum_expected_size",
    "region_from_filename",
    "resolve_download_path",
    "retry_with_backoff",
    "select_technology_files",
]
