"""Availability library — provider result shaping, technology metadata, and the cell result cache.

Public API:
    - ProviderAvailability: One provider/technology offering at a location
    - collapse_observations: Merge duplicate observations and order by speed
    - ResultCache: Thread-safe TTL + LRU cache keyed by H3 cell
    - TechCode / TechMeta / tech_meta: Technology codes and display metadata
    - speed_tier / format_speed: Presentation helpers
"""

from broadband_api.lib.availability.aggregate import ProviderAvailability, collapse_observations
from broadband_api.lib.availability.cache import ResultCache
from broadband_api.lib.availability.technology import TECH_META, TechCode, TechMeta, format_speed, speed_tier, tech_meta

__all__ = [
    "TECH_META",
    "ProviderAvailability",
    "ResultCache",
    "TechCode",
    "TechMeta",
    "collapse_observations",
    "format_speed",
    "speed_tier",
    "tech_meta",
]
