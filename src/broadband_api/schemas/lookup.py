"""Pydantic v2 schemas for availability lookups and health checks."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from broadband_api.lib.availability import ProviderAvailability, format_speed, speed_tier, tech_meta


class LookupRequest(BaseModel):
    """Location to resolve: coordinates, an address, or both.

    Coordinate ranges are checked by the resolver so that out-of-range input
    gets the same structured error envelope as missing input.
    """

    lat: float | None = Field(default=None, description="Latitude in decimal degrees")
    lng: float | None = Field(default=None, description="Longitude in decimal degrees")
    address: str | None = Field(default=None, max_length=500, description="Free-form street address")


class ProviderResult(BaseModel):
    """One provider/technology offering with presentation fields."""

    provider_id: str
    provider_name: str
    technology_code: int
    technology_label: str
    technology_color: str
    technology_bg: str
    max_download_speed: float
    max_upload_speed: float
    low_latency: bool
    speed_tier: str
    download_display: str
    upload_display: str

    @classmethod
    def from_availability(cls, provider: ProviderAvailability) -> "ProviderResult":
        meta = tech_meta(provider.technology_code)
        return cls(
            provider_id=provider.provider_id,
            provider_name=provider.provider_name,
            technology_code=provider.technology_code,
            technology_label=meta.label,
            technology_color=meta.color,
            technology_bg=meta.bg,
            max_download_speed=provider.max_download_speed,
            max_upload_speed=provider.max_upload_speed,
            low_latency=provider.low_latency,
            speed_tier=speed_tier(provider.max_download_speed),
            download_display=format_speed(provider.max_download_speed),
            upload_display=format_speed(provider.max_upload_speed),
        )


class LookupData(BaseModel):
    """Payload of a successful lookup (possibly with no providers)."""

    providers: list[ProviderResult] = Field(default_factory=list)
    h3_index: str | None = None
    block_geoid: str | None = None
    data_vintage: str | None = None
    lookup_method: Literal["cell", "block"] = "cell"
    note: str | None = None


class LookupResponse(BaseModel):
    """Envelope for lookup results; ``error`` is set only when ``success`` is false."""

    success: bool
    data: LookupData | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Service health and the currently active release."""

    status: Literal["ok", "error"]
    data_vintage: str | None = None
    last_import: datetime | None = None
