"""Tiered resolver — answers "which providers serve this location" queries.

Resolution cascades through four tiers and stops at the first that yields
providers:

1. Result cache, keyed by H3 cell.
2. Aggregate view by H3 cell.
3. Census geocoder for the Census block (address when given, else coordinates).
4. Aggregate view by Census block.

Each terminal state is its own dataclass, so callers and tests match on the
outcome type rather than on flags.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.availability import ProviderAvailability, ResultCache
from broadband_api.lib.geocoder import CensusBlockGeocoder
from broadband_api.lib.spatial import cell_for, validate_coordinates
from broadband_api.services.availability_service import query_by_block, query_by_cell

ADDRESS_NOT_FOUND_NOTE = "Address could not be geocoded"


@dataclass(frozen=True)
class CellHit:
    """Providers found for the H3 cell, fresh or from the result cache."""

    cell_id: str
    providers: tuple[ProviderAvailability, ...]
    from_cache: bool = False
    method: str = "cell"


@dataclass(frozen=True)
class BlockHit:
    """Providers found through the Census block fallback."""

    cell_id: str
    block_geoid: str
    providers: tuple[ProviderAvailability, ...]
    method: str = "block"


@dataclass(frozen=True)
class Empty:
    """Every tier was exhausted without data; not an error for the caller."""

    cell_id: str | None = None
    block_geoid: str | None = None
    note: str | None = None
    method: str = "cell"

    @property
    def providers(self) -> tuple[ProviderAvailability, ...]:
        return ()


@dataclass(frozen=True)
class InputError:
    """The request carried no usable location."""

    message: str


Outcome = CellHit | BlockHit | Empty | InputError


def validate_lookup_input(lat: float | None, lng: float | None, address: str | None) -> InputError | None:
    """Check that a request has coordinates or an address, and that coordinates are in range."""
    has_coordinates = lat is not None and lng is not None
    has_address = bool(address and address.strip())

    if not has_coordinates and not has_address:
        return InputError("Either lat/lng or address is required")
    if has_coordinates:
        try:
            validate_coordinates(lat, lng)  # type: ignore[arg-type]
        except ValueError as e:
            return InputError(str(e))
    return None


class Resolver:
    """Resolves a location to the providers serving it.

    Args:
        cache: Process-wide result cache keyed by H3 cell.
        geocoder: Census geocoder used for address and block fallbacks.
    """

    def __init__(self, cache: ResultCache, geocoder: CensusBlockGeocoder) -> None:
        self._cache = cache
        self._geocoder = geocoder

    async def resolve(
        self,
        session: AsyncSession,
        lat: float | None = None,
        lng: float | None = None,
        address: str | None = None,
    ) -> Outcome:
        """Run the resolution cascade for one request.

        Input is validated before any cache, database, or network access.

        Args:
            session: Database session for the aggregate view and geocode cache.
            lat: Latitude in decimal degrees.
            lng: Longitude in decimal degrees.
            address: Free-form address, used when coordinates are absent and
                as the geocode cache key for the block fallback.

        Returns:
            CellHit, BlockHit, Empty, or InputError.
        """
        error = validate_lookup_input(lat, lng, address)
        if error is not None:
            return error

        address = address.strip() if address and address.strip() else None
        block_hint: str | None = None

        if lat is None or lng is None:
            match = await self._geocoder.geocode_address(session, address)  # type: ignore[arg-type]
            if match is None:
                return Empty(note=ADDRESS_NOT_FOUND_NOTE)
            lat, lng = match.latitude, match.longitude
            block_hint = match.block_geoid

        cell_id = cell_for(lat, lng)

        cached = self._cache.get(cell_id)
        if cached is not None:
            logger.debug(f"Result cache hit for {cell_id}")
            return CellHit(cell_id=cell_id, providers=cached, from_cache=True)

        if block_hint is None:
            providers = await query_by_cell(session, cell_id)
            if providers:
                self._cache.set(cell_id, providers)
                return CellHit(cell_id=cell_id, providers=tuple(providers))
            block_geoid = await self._geocoder.geocode_coordinates(session, lat, lng, address=address)
        else:
            block_geoid = block_hint

        if block_geoid is None:
            return Empty(cell_id=cell_id)

        providers = await query_by_block(session, block_geoid)
        if not providers:
            return Empty(cell_id=cell_id, block_geoid=block_geoid)

        # Stored under the original cell so later lookups in this cell hit the cache.
        self._cache.set(cell_id, providers)
        return BlockHit(cell_id=cell_id, block_geoid=block_geoid, providers=tuple(providers))
