"""Geocoding result types and provider error."""

from dataclasses import dataclass
from enum import StrEnum


class MatchType(StrEnum):
    """How a cached geocode was obtained."""

    COORDINATES = "coordinates"
    ADDRESS = "address"


@dataclass(frozen=True)
class GeocodeMatch:
    """Resolved location for an address or coordinate lookup."""

    latitude: float
    longitude: float
    block_geoid: str | None = None
    match_type: MatchType = MatchType.ADDRESS

    def __post_init__(self) -> None:
        if not (-90 <= self.latitude <= 90):
            msg = f"latitude must be between -90 and 90, got {self.latitude}"
            raise ValueError(msg)
        if not (-180 <= self.longitude <= 180):
            msg = f"longitude must be between -180 and 180, got {self.longitude}"
            raise ValueError(msg)


class GeocodingProviderError(Exception):
    """Raised when a geocoding provider experiences a transport or service error.

    Distinguishes provider failures (timeout, HTTP error, connection error,
    unparseable body) from a successful response with no match.

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")
