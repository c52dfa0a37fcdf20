"""AvailabilityRecord model — one raw row per location observation imported from a BDC release."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from broadband_api.models.base import Base, IdentityMixin


class AvailabilityRecord(Base, IdentityMixin):
    """Raw broadband availability observation keyed by Census block and H3 cell.

    Rows are bulk-loaded with COPY and never updated; re-importing a release
    replaces the rows for that (release, region) pair.
    """

    __tablename__ = "broadband_availability"

    # Census FIPS block code (15 chars), e.g. "450910609101007"
    block_geoid: Mapped[str] = mapped_column(String(15), nullable=False)
    h3_res8_id: Mapped[str] = mapped_column(String(20), nullable=False)

    provider_id: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_name: Mapped[str] = mapped_column(Text, nullable=False)
    brand_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    technology_code: Mapped[int] = mapped_column(Integer, nullable=False)
    max_download_speed: Mapped[float] = mapped_column(Float(precision=24), nullable=False)
    max_upload_speed: Mapped[float] = mapped_column(Float(precision=24), nullable=False)
    low_latency: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    # B = business, R = residential, X = both
    business_residential_code: Mapped[str] = mapped_column(
        String(1), nullable=False, default="R", server_default="R"
    )

    state_fips: Mapped[str] = mapped_column(String(2), nullable=False)
    data_vintage: Mapped[str] = mapped_column(String(10), nullable=False)
    imported_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_broadband_h3", "h3_res8_id"),
        Index("idx_broadband_geoid", "block_geoid"),
        Index("idx_broadband_vintage_state", "data_vintage", "state_fips"),
    )


# Column order used by the COPY bulk loader.
COPY_COLUMNS: tuple[str, ...] = (
    "block_geoid",
    "h3_res8_id",
    "provider_id",
    "provider_name",
    "brand_name",
    "technology_code",
    "max_download_speed",
    "max_upload_speed",
    "low_latency",
    "business_residential_code",
    "state_fips",
    "data_vintage",
)
