"""US Census Bureau geographies geocoder.

Resolves coordinates to a 2020 Census block GEOID and free-form addresses to
coordinates plus block GEOID using the Census Geocoding API
(https://geocoding.geo.census.gov/geocoder/). Every lookup consults the
geocode cache first and writes successful results through to it.

Provider failures never escape the public methods: a timeout, non-2xx
response, or malformed payload is logged and reported as "no result" so the
resolver can fall through to its next tier.
"""

import httpx
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.lib.geocoder.base import GeocodeMatch, GeocodingProviderError, MatchType
from broadband_api.lib.geocoder.cache import cache_lookup, cache_store, coordinate_key

CENSUS_GEOGRAPHIES_URL = "https://geocoding.geo.census.gov/geocoder/geographies"
DEFAULT_TIMEOUT = 10.0
CENSUS_BLOCK_LAYER = "2020 Census Blocks"
BLOCK_GEOID_LENGTH = 15

_COMMON_PARAMS = {
    "benchmark": "Public_AR_Current",
    "vintage": "Current_Current",
    "format": "json",
}


class CensusBlockGeocoder:
    """Census Bureau coordinate→block and address→coordinate+block geocoder."""

    provider_name = "census"

    def __init__(self, base_url: str = CENSUS_GEOGRAPHIES_URL, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def geocode_coordinates(
        self,
        session: AsyncSession,
        lat: float,
        lng: float,
        address: str | None = None,
    ) -> str | None:
        """Resolve coordinates to a Census block GEOID.

        Cached under the address when one is supplied and under the rounded
        coordinate pair. An address entry written by an earlier address
        geocode may lack a block; the coordinate entry still serves later calls.

        Args:
            session: Database session for the geocode cache.
            lat: Latitude in decimal degrees.
            lng: Longitude in decimal degrees.
            address: Optional address the coordinates were taken from.

        Returns:
            15-character block GEOID, or None if it could not be determined.
        """
        keys = [coordinate_key(lat, lng)]
        if address and address.strip():
            keys.insert(0, address)

        for key in keys:
            cached = await cache_lookup(session, key, require_block=True)
            if cached is not None:
                logger.debug("Geocode cache hit (coordinates)")
                return cached.block_geoid

        params = {"x": str(lng), "y": str(lat), **_COMMON_PARAMS}
        try:
            data = await self._request("coordinates", params)
        except GeocodingProviderError as e:
            logger.warning(f"Census block lookup failed: {e}")
            return None

        geoid = self._parse_block(data)
        if geoid is None:
            return None

        match = GeocodeMatch(latitude=lat, longitude=lng, block_geoid=geoid, match_type=MatchType.COORDINATES)
        for key in keys:
            await cache_store(session, key, match)
        await session.commit()
        return geoid

    async def geocode_address(self, session: AsyncSession, address: str) -> GeocodeMatch | None:
        """Resolve a free-form address to coordinates and, when available, a block GEOID.

        Args:
            session: Database session for the geocode cache.
            address: Free-form address string.

        Returns:
            GeocodeMatch, or None if the address could not be geocoded.
        """
        if not address or not address.strip():
            return None

        cached = await cache_lookup(session, address)
        if cached is not None:
            logger.debug("Geocode cache hit (address)")
            return cached

        params = {"address": address.strip(), **_COMMON_PARAMS}
        try:
            data = await self._request("onelineaddress", params)
        except GeocodingProviderError as e:
            logger.warning(f"Census address geocode failed: {e}")
            return None

        match = self._parse_address(data)
        if match is None:
            return None

        await cache_store(session, address, match)
        await session.commit()
        return match

    async def _request(self, endpoint: str, params: dict[str, str]) -> dict:
        """Issue a GET against a geographies endpoint and decode the JSON body.

        Raises:
            GeocodingProviderError: On timeout, HTTP error, connection failure, or non-JSON body.
        """
        url = f"{self._base_url}/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise GeocodingProviderError("census", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            raise GeocodingProviderError(
                "census", f"Provider returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise GeocodingProviderError("census", f"Connection to geocoding provider failed: {e}") from e
        except ValueError as e:
            raise GeocodingProviderError("census", "Provider returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise GeocodingProviderError("census", "Provider returned an unexpected payload")
        return data

    @staticmethod
    def _first_block(geographies: object) -> str | None:
        """Extract the first block GEOID from a ``geographies`` mapping."""
        if not isinstance(geographies, dict):
            return None
        blocks = geographies.get(CENSUS_BLOCK_LAYER)
        if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
            return None
        geoid = blocks[0].get("GEOID")
        if not isinstance(geoid, str) or len(geoid) != BLOCK_GEOID_LENGTH:
            return None
        return geoid

    def _parse_block(self, data: dict) -> str | None:
        """Parse a coordinates response into a block GEOID."""
        result = data.get("result")
        if not isinstance(result, dict):
            logger.warning("Census coordinates response missing 'result'")
            return None
        return self._first_block(result.get("geographies"))

    def _parse_address(self, data: dict) -> GeocodeMatch | None:
        """Parse a one-line-address response into a GeocodeMatch."""
        result = data.get("result")
        if not isinstance(result, dict):
            logger.warning("Census address response missing 'result'")
            return None
        matches = result.get("addressMatches")
        if not isinstance(matches, list) or not matches or not isinstance(matches[0], dict):
            return None

        best = matches[0]
        coords = best.get("coordinates")
        if not isinstance(coords, dict):
            return None
        try:
            lng = float(coords["x"])
            lat = float(coords["y"])
            return GeocodeMatch(
                latitude=lat,
                longitude=lng,
                block_geoid=self._first_block(best.get("geographies")),
                match_type=MatchType.ADDRESS,
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to parse Census address response: {e}")
            return None
