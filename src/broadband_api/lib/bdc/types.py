"""Data types for the FCC Broadband Data Collection (BDC) pipeline library.

Defines upstream catalog entries, per-file download outcomes, and the error
types that abort a pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class BdcApiError(Exception):
    """Raised when a BDC API call fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PipelineError(Exception):
    """Hard pipeline fault: the run aborts and no release is activated."""


@dataclass(frozen=True)
class AsOfDate:
    """One entry from the ``listAsOfDates`` endpoint."""

    data_type: str
    as_of_date: str


@dataclass(frozen=True)
class BdcFileEntry:
    """A downloadable file listed for a release.

    Attributes:
        file_id: Upstream id used by the download endpoint.
        file_name: File name without extension.
        state_fips: Two-digit state FIPS code the file covers.
        technology_code: Technology code as published (may be empty).
        record_count: Declared number of rows in the file.
        category: Upstream category label.
        subcategory: Upstream subcategory label.
    """

    file_id: int
    file_name: str
    state_fips: str
    technology_code: str = ""
    record_count: int = 0
    category: str = ""
    subcategory: str = ""

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> BdcFileEntry:
        """Build an entry from a catalog record.

        Raises:
            KeyError: If ``file_id`` or ``file_name`` is missing.
            ValueError: If ``file_id`` is not an integer.
        """
        record_count = raw.get("record_count") or 0
        try:
            record_count = int(record_count)
        except (TypeError, ValueError):
            record_count = 0
        return cls(
            file_id=int(raw["file_id"]),
            file_name=str(raw["file_name"]),
            state_fips=str(raw.get("state_fips") or ""),
            technology_code=str(raw.get("technology_code") or ""),
            record_count=record_count,
            category=str(raw.get("category") or ""),
            subcategory=str(raw.get("subcategory") or ""),
        )


@dataclass
class DownloadResult:
    """Tracks the outcome of acquiring a single file.

    Attributes:
        entry: The catalog entry this result is for.
        local_path: Where the file is stored locally (set on success).
        downloaded: True if fetched during this run, False if an existing copy was reused.
        attempts: Number of download attempts made.
        error: Error message if every attempt failed, or None.
    """

    entry: BdcFileEntry
    local_path: Path | None = None
    downloaded: bool = False
    attempts: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        """Whether the file is available locally."""
        return self.local_path is not None and self.error is None


@dataclass(frozen=True)
class AcquiredFile:
    """An archive ready for ingestion, tagged with its region."""

    path: Path
    region: str
