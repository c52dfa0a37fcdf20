"""Collapse per-block provider observations into one entry per provider and technology."""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderAvailability:
    """Best advertised service of one provider using one technology at a location."""

    provider_id: str
    provider_name: str
    technology_code: int
    max_download_speed: float
    max_upload_speed: float
    low_latency: bool


def collapse_observations(rows: Iterable[ProviderAvailability]) -> list[ProviderAvailability]:
    """Merge duplicate (provider, technology) observations and order by speed.

    A cell usually spans several Census blocks, and a block can carry several
    observations for the same provider and technology. Each group keeps the
    maximum of both speeds and the logical OR of the low-latency flag, so the
    result does not depend on input order.

    Args:
        rows: Observations for a single cell or block.

    Returns:
        One entry per (provider_id, technology_code), ordered by descending
        download speed, then provider name and technology code.
    """
    merged: dict[tuple[str, int], ProviderAvailability] = {}
    for row in rows:
        key = (row.provider_id, row.technology_code)
        current = merged.get(key)
        if current is None:
            merged[key] = row
            continue
        merged[key] = ProviderAvailability(
            provider_id=row.provider_id,
            provider_name=min(current.provider_name, row.provider_name),
            technology_code=row.technology_code,
            max_download_speed=max(current.max_download_speed, row.max_download_speed),
            max_upload_speed=max(current.max_upload_speed, row.max_upload_speed),
            low_latency=current.low_latency or row.low_latency,
        )

    return sorted(
        merged.values(),
        key=lambda p: (-p.max_download_speed, p.provider_name, p.technology_code),
    )
