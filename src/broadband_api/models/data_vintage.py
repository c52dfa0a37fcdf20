"""DataVintage model — tracks each BDC release and which one is active."""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Index, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from broadband_api.models.base import Base, IdentityMixin


class DataVintage(Base, IdentityMixin):
    """One row per data release; at most one row has ``is_active = true``."""

    __tablename__ = "data_vintages"

    vintage_id: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    discovered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    import_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    import_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    record_count: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    states_imported: Mapped[list[str] | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index(
            "uq_data_vintages_single_active",
            "is_active",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )
