"""Shared builders for test data."""

import io
import zipfile
from pathlib import Path

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.spatial import cell_for
from broadband_api.models import block_availability

# York County, SC
SAMPLE_LAT = 35.017693
SAMPLE_LNG = -81.04225
SAMPLE_BLOCK = "450910609101007"
SAMPLE_RELEASE = "2025-06-30"


def view_row(**overrides: object) -> dict[str, object]:
    """Build a block_availability row with sensible defaults."""
    row: dict[str, object] = {
        "h3_res8_id": cell_for(SAMPLE_LAT, SAMPLE_LNG),
        "block_geoid": SAMPLE_BLOCK,
        "provider_id": "130077",
        "provider_name": "Comporium",
        "brand_name": "Comporium",
        "technology_code": 50,
        "max_download_speed": 500.0,
        "max_upload_speed": 500.0,
        "low_latency": True,
        "data_vintage": SAMPLE_RELEASE,
    }
    row.update(overrides)
    return row


async def seed_view(session: AsyncSession, rows: list[dict[str, object]]) -> None:
    """Insert rows into the aggregate view table."""
    await session.execute(insert(block_availability), rows)
    await session.commit()


def make_bdc_zip(path: Path, csv_text: str, member: str = "availability.csv") -> Path:
    """Write a zip archive holding a single CSV member."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(member, csv_text)
    path.write_bytes(buf.getvalue())
    return path
