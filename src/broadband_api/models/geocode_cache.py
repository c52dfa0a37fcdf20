"""GeocodeCacheEntry model — write-once cache of Census geocoder results."""

from datetime import datetime

from sqlalchemy import DateTime, Double, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from broadband_api.models.base import Base, IdentityMixin


class GeocodeCacheEntry(Base, IdentityMixin):
    """Cached geocoding result keyed by the SHA-256 of the normalized lookup key."""

    __tablename__ = "geocode_cache"

    address_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    original_address: Mapped[str] = mapped_column(Text, nullable=False)
    lat: Mapped[float] = mapped_column(Double, nullable=False)
    lng: Mapped[float] = mapped_column(Double, nullable=False)
    block_geoid: Mapped[str | None] = mapped_column(String(15), nullable=True)
    # "coordinates" or "address"
    match_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
