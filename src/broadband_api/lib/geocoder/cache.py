"""Database-backed, write-once cache for geocoding results.

Entries are keyed by the SHA-256 of the lower-cased, trimmed lookup key (an
address, or a coordinate string for coordinate-only lookups). Stores use
``INSERT ... ON CONFLICT DO NOTHING`` so concurrent writers for the same key
never error and the first stored value is never overwritten.
"""

import hashlib

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.geocoder.base import GeocodeMatch, MatchType
from broadband_api.models.geocode_cache import GeocodeCacheEntry


def normalize_key(key: str) -> str:
    """Normalize a lookup key for hashing (lower-case, trimmed)."""
    return key.lower().strip()


def hash_key(key: str) -> str:
    """Return the hex SHA-256 digest of a normalized lookup key."""
    return hashlib.sha256(normalize_key(key).encode("utf-8")).hexdigest()


def coordinate_key(lat: float, lng: float) -> str:
    """Build the cache key for a coordinate-only lookup (~10 cm precision)."""
    return f"{lat:.6f},{lng:.6f}"


async def cache_lookup(
    session: AsyncSession,
    key: str,
    *,
    require_block: bool = False,
) -> GeocodeMatch | None:
    """Look up a cached geocoding result.

    Args:
        session: Database session.
        key: Address or coordinate key (normalized before hashing).
        require_block: Treat entries without a block GEOID as a miss.

    Returns:
        GeocodeMatch if a usable entry exists, None on cache miss.
    """
    result = await session.execute(select(GeocodeCacheEntry).where(GeocodeCacheEntry.address_hash == hash_key(key)))
    entry = result.scalar_one_or_none()
    if entry is None:
        return None
    if require_block and not entry.block_geoid:
        return None

    return GeocodeMatch(
        latitude=entry.lat,
        longitude=entry.lng,
        block_geoid=entry.block_geoid,
        match_type=MatchType(entry.match_type) if entry.match_type else MatchType.ADDRESS,
    )


async def cache_store(
    session: AsyncSession,
    key: str,
    match: GeocodeMatch,
) -> bool:
    """Insert a geocoding result unless the key is already cached.

    Args:
        session: Database session.
        key: Address or coordinate key; stored verbatim as ``original_address``.
        match: Geocoding result to cache.

    Returns:
        True if this call inserted the entry, False if one already existed.
    """
    insert = sqlite_insert if session.get_bind().dialect.name == "sqlite" else pg_insert
    stmt = (
        insert(GeocodeCacheEntry)
        .values(
            address_hash=hash_key(key),
            original_address=key,
            lat=match.latitude,
            lng=match.longitude,
            block_geoid=match.block_geoid,
            match_type=match.match_type.value,
        )
        .on_conflict_do_nothing(index_elements=["address_hash"])
    )
    result = await session.execute(stmt)
    await session.flush()
    return bool(result.rowcount)
