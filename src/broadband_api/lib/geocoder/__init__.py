"""Geocoder library — Census block geocoding with a write-once database cache.

Public API:
    - CensusBlockGeocoder: Coordinate→block and address→coordinate+block client
    - GeocodeMatch: Resolved location dataclass
    - MatchType: How a cached geocode was obtained
    - GeocodingProviderError: Transport/service failure raised internally
    - cache_lookup / cache_store: Database caching functions
    - hash_key / normalize_key / coordinate_key: Cache key helpers
"""

from broadband_api.lib.geocoder.base import GeocodeMatch, GeocodingProviderError, MatchType
from broadband_api.lib.geocoder.cache import cache_lookup, cache_store, coordinate_key, hash_key, normalize_key
from broadband_api.lib.geocoder.census import CensusBlockGeocoder

__all__ = [
    "CensusBlockGeocoder",
    "GeocodeMatch",
    "GeocodingProviderError",
    "MatchType",
    "cache_lookup",
    "cache_store",
    "coordinate_key",
    "hash_key",
    "normalize_key",
]
