"""Release discovery and client-side filtering of the BDC file catalog."""

import re

from loguru import logger

from broadband_api.lib.bdc.client import BdcClient
from broadband_api.lib.bdc.types import BdcFileEntry

AVAILABILITY_DATA_TYPE = "availability"

# Identifiers embedded in per-technology file names, e.g.
# bdc_45_FibertothePremises_fixed_broadband_J25_10dec2025.
TECH_FILE_KEYWORDS: frozenset[str] = frozenset(
    {
        "Copper",
        "Cable",
        "FibertothePremises",
        "GSOSatellite",
        "NGSOSatellite",
        "UnlicensedFixedWireless",
        "LicensedFixedWireless",
        "LicensedByRuleFixedWireless",
    }
)

_TECH_FILE_RE = re.compile(r"^bdc_\d{2}_([^_]+)_fixed_broadband")
_REGION_RE = re.compile(r"^bdc_(\d{2})_")


async def list_available_vintages(client: BdcClient) -> list[str]:
    """Return availability release ids, newest first.

    Challenge-category releases are excluded. Release ids are ISO dates, so a
    lexicographic descending sort orders them newest first.

    Raises:
        BdcApiError: If the release listing cannot be fetched.
    """
    dates = await client.list_as_of_dates()
    releases = {d.as_of_date for d in dates if d.data_type.lower() == AVAILABILITY_DATA_TYPE}
    return sorted(releases, reverse=True)


def is_technology_file(file_name: str) -> bool:
    """Whether a catalog file is a per-technology fixed broadband file.

    Summary and geography files, and anything not matching the
    ``bdc_<FIPS>_<technology>_fixed_broadband`` naming, are rejected.
    """
    if "fixed_broadband" not in file_name or "summary" in file_name.lower():
        return False
    match = _TECH_FILE_RE.match(file_name)
    return match is not None and match.group(1) in TECH_FILE_KEYWORDS


def select_technology_files(entries: list[BdcFileEntry], region: str) -> list[BdcFileEntry]:
    """Select the per-technology files for one region from a release catalog.

    Args:
        entries: Complete catalog for a release.
        region: Two-digit state FIPS code.

    Returns:
        Matching entries in catalog order.
    """
    selected = [e for e in entries if e.state_fips == region and is_technology_file(e.file_name)]
    for entry in selected:
        logger.debug(f"  {entry.file_name} ({entry.record_count:,} records)")
    return selected


def region_from_filename(file_name: str) -> str | None:
    """Extract the two-digit state FIPS code from a ``bdc_XX_...`` file name."""
    match = _REGION_RE.match(file_name)
    return match.group(1) if match else None
