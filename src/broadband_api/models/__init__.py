"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from broadband_api.models.availability_record import AvailabilityRecord
from broadband_api.models.block_availability import block_availability, view_metadata
from broadband_api.models.data_vintage import DataVintage
from broadband_api.models.geocode_cache import GeocodeCacheEntry

__all__ = [
    "AvailabilityRecord",
    "DataVintage",
    "GeocodeCacheEntry",
    "block_availability",
    "view_metadata",
]
