"""Streaming parser for BDC availability archives.

Each archive holds one CSV. It is read in chunks straight out of the zip
member, so a multi-million-row file is never held in memory. Header names
vary between releases; every logical field accepts several source headers,
matched case-insensitively.
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from zipfile import ZipFile

import pandas as pd
from loguru import logger

from broadband_api.models.availability_record import AvailabilityRecord

# Logical field → accepted source headers, in priority order.
FIELD_CANDIDATES: dict[str, tuple[str, ...]] = {
    "block_geoid": ("block_geoid", "block_fips", "geoid"),
    "h3_res8_id": ("h3_res8_id", "h3_res8", "h3_index"),
    "provider_id": ("provider_id", "frn"),
    "provider_name": ("brand_name", "doing_business_as", "provider_name"),
    "brand_name": ("brand_name",),
    "technology_code": ("technology", "technology_code"),
    "max_download_speed": ("max_advertised_download_speed", "max_download_speed"),
    "max_upload_speed": ("max_advertised_upload_speed", "max_upload_speed"),
    "low_latency": ("low_latency",),
    "business_residential_code": ("business_residential_code",),
}

DEFAULT_CHUNK_SIZE = 50_000

# Bounded string columns of broadband_availability; longer values would fail the COPY.
COLUMN_WIDTHS: dict[str, int] = {
    name: AvailabilityRecord.__table__.c[name].type.length
    for name in ("block_geoid", "h3_res8_id", "provider_id", "business_residential_code", "state_fips", "data_vintage")
}

# Ranges of the INTEGER and REAL columns.
INT_MIN, INT_MAX = -(2**31), 2**31 - 1
REAL_MAX = 3.4e38

# Bulk-load row: block_geoid, h3_res8_id, provider_id, provider_name, brand_name,
# technology_code, max_download_speed, max_upload_speed, low_latency,
# business_residential_code, state_fips, data_vintage
AvailabilityRow = tuple[str, str, str, str, str | None, int, float, float, bool, str, str, str]


@dataclass(frozen=True)
class ColumnMap:
    """Source headers present in a file for each logical field, in priority order."""

    fields: dict[str, tuple[str, ...]]

    @classmethod
    def from_headers(cls, headers: list[str]) -> "ColumnMap":
        by_lower = {h.strip().lower(): h for h in headers}
        fields = {
            field: tuple(by_lower[c] for c in candidates if c in by_lower)
            for field, candidates in FIELD_CANDIDATES.items()
        }
        return cls(fields=fields)

    @property
    def missing(self) -> list[str]:
        """Logical fields with no matching header."""
        return [field for field, headers in self.fields.items() if not headers]

    def value(self, row: dict[str, str], field: str) -> str:
        """First non-empty value among the headers mapped to ``field``."""
        for header in self.fields[field]:
            value = row.get(header)
            if value:
                return value.strip()
        return ""


def _fits_real(value: float) -> bool:
    return math.isfinite(value) and abs(value) <= REAL_MAX


def normalize_row(row: dict[str, str], columns: ColumnMap, release: str, region: str) -> AvailabilityRow | None:
    """Convert one CSV row to a bulk-load tuple.

    Args:
        row: Header → raw string value.
        columns: Header mapping for the file.
        release: Release id stamped on every row.
        region: State FIPS code stamped on every row.

    Returns:
        The normalized row, or None when the row has neither a block id nor
        an H3 cell, carries a number the table cannot store, or has a value
        too wide for its column or containing a NUL byte.
    """
    block_geoid = columns.value(row, "block_geoid")
    h3_res8_id = columns.value(row, "h3_res8_id")
    if not block_geoid and not h3_res8_id:
        return None

    try:
        technology = columns.value(row, "technology_code")
        technology_code = int(float(technology)) if technology else 0
        download = columns.value(row, "max_download_speed")
        upload = columns.value(row, "max_upload_speed")
        max_download_speed = float(download) if download else 0.0
        max_upload_speed = float(upload) if upload else 0.0
    except (ValueError, OverflowError):
        return None
    if not INT_MIN <= technology_code <= INT_MAX:
        return None
    if not (_fits_real(max_download_speed) and _fits_real(max_upload_speed)):
        return None

    provider_id = columns.value(row, "provider_id")
    provider_name = columns.value(row, "provider_name")
    brand_name = columns.value(row, "brand_name") or None
    business_residential_code = columns.value(row, "business_residential_code") or "R"

    bounded = {
        "block_geoid": block_geoid,
        "h3_res8_id": h3_res8_id,
        "provider_id": provider_id,
        "business_residential_code": business_residential_code,
        "state_fips": region,
        "data_vintage": release,
    }
    if any(len(bounded[name]) > width for name, width in COLUMN_WIDTHS.items()):
        return None
    if any("\x00" in v for v in (*bounded.values(), provider_name, brand_name or "")):
        return None

    return (
        block_geoid,
        h3_res8_id,
        provider_id,
        provider_name,
        brand_name,
        technology_code,
        max_download_speed,
        max_upload_speed,
        columns.value(row, "low_latency").lower() in ("1", "true"),
        business_residential_code,
        region,
        release,
    )


def find_csv_in_zip(zf: ZipFile) -> str:
    """Return the name of the single CSV member in an archive.

    Raises:
        ValueError: If the archive holds no CSV.
    """
    names = [n for n in zf.namelist() if n.lower().endswith(".csv") and not n.startswith("__MACOSX")]
    if not names:
        msg = "Archive contains no CSV file"
        raise ValueError(msg)
    if len(names) > 1:
        logger.warning(f"Archive contains {len(names)} CSV files; using {names[0]}")
    return names[0]


def iter_archive_rows(
    zip_path: Path,
    release: str,
    region: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[AvailabilityRow]:
    """Yield normalized rows from a BDC archive, one chunk in memory at a time.

    Rows with the wrong number of fields are skipped by the CSV reader, and
    rows that fail normalization are dropped.

    Raises:
        ValueError: If the archive holds no CSV.
        zipfile.BadZipFile: If the file is not a zip archive.
    """
    with ZipFile(zip_path) as zf:
        member = find_csv_in_zip(zf)
        logger.info(f"Parsing {zip_path.name}:{member} (chunk_size={chunk_size})")

        with zf.open(member) as fh:
            reader = pd.read_csv(
                fh,
                chunksize=chunk_size,
                dtype=str,
                keep_default_na=False,
                on_bad_lines="skip",
            )

            columns: ColumnMap | None = None
            for chunk in reader:
                if columns is None:
                    columns = ColumnMap.from_headers(list(chunk.columns))
                    if columns.missing:
                        logger.warning(f"{zip_path.name}: no column found for {', '.join(columns.missing)}")

                for row in chunk.fillna("").to_dict("records"):
                    record = normalize_row(row, columns, release, region)
                    if record is not None:
                        yield record
