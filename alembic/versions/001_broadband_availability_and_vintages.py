"""Create broadband_availability, data_vintages, and geocode_cache tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Raw availability rows, bulk-loaded per (release, region)
    op.create_table(
        "broadband_availability",
        sa.Column("id", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column("block_geoid", sa.String(15), nullable=False),
        sa.Column("h3_res8_id", sa.String(20), nullable=False),
        sa.Column("provider_id", sa.String(20), nullable=False),
        sa.Column("provider_name", sa.Text(), nullable=False),
        sa.Column("brand_name", sa.Text(), nullable=True),
        sa.Column("technology_code", sa.Integer(), nullable=False),
        sa.Column("max_download_speed", sa.REAL(), nullable=False),
        sa.Column("max_upload_speed", sa.REAL(), nullable=False),
        sa.Column("low_latency", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("business_residential_code", sa.String(1), nullable=False, server_default="R"),
        sa.Column("state_fips", sa.String(2), nullable=False),
        sa.Column("data_vintage", sa.String(10), nullable=False),
        sa.Column(
            "imported_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_broadband_h3", "broadband_availability", ["h3_res8_id"])
    op.create_index("idx_broadband_geoid", "broadband_availability", ["block_geoid"])
    op.create_index("idx_broadband_vintage_state", "broadband_availability", ["data_vintage", "state_fips"])

    # Release tracking
    op.create_table(
        "data_vintages",
        sa.Column("id", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column("vintage_id", sa.String(10), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("discovered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("import_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("import_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("record_count", sa.BigInteger(), nullable=True),
        sa.Column("states_imported", postgresql.JSONB(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("vintage_id", name="uq_data_vintages_vintage_id"),
    )
    # At most one active release
    op.create_index(
        "uq_data_vintages_single_active",
        "data_vintages",
        ["is_active"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    # Geocode cache
    op.create_table(
        "geocode_cache",
        sa.Column("id", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column("address_hash", sa.String(64), nullable=False),
        sa.Column("original_address", sa.Text(), nullable=False),
        sa.Column("lat", sa.Double(), nullable=False),
        sa.Column("lng", sa.Double(), nullable=False),
        sa.Column("block_geoid", sa.String(15), nullable=True),
        sa.Column("match_type", sa.String(20), nullable=True),
        sa.Column(
            "cached_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("address_hash", name="uq_geocode_cache_address_hash"),
    )


def downgrade() -> None:
    op.drop_table("geocode_cache")
    op.drop_index("uq_data_vintages_single_active", table_name="data_vintages")
    op.drop_table("data_vintages")
    op.drop_index("idx_broadband_vintage_state", table_name="broadband_availability")
    op.drop_index("idx_broadband_geoid", table_name="broadband_availability")
    op.drop_index("idx_broadband_h3", table_name="broadband_availability")
    op.drop_table("broadband_availability")
