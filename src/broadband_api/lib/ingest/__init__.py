"""Ingest library — streaming parse of BDC archives and COPY bulk loading.

Public API:
    - iter_archive_rows: Normalized rows from a zipped CSV, streamed in chunks
    - normalize_row / ColumnMap: Per-row normalization with header fallbacks
    - copy_rows / ingest_archive: COPY sink into broadband_availability
    - IngestResult: Per-archive load outcome
"""

from broadband_api.lib.ingest.loader import IngestResult, copy_rows, ingest_archive
from broadband_api.lib.ingest.parser import (
    FIELD_CANDIDATES,
    AvailabilityRow,
    ColumnMap,
    find_csv_in_zip,
    iter_archive_rows,
    normalize_row,
)

__all__ = [
    "FIELD_CANDIDATES",
    "AvailabilityRow",
    "ColumnMap",
    "IngestResult",
    "copy_rows",
    "find_csv_in_zip",
    "ingest_archive",
    "iter_archive_rows",
    "normalize_row",
]
