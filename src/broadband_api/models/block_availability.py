"""Aggregate view over the active release, as read by the resolver.

``block_availability`` is a PostgreSQL materialized view rebuilt by vintage
activation, so it lives in its own ``MetaData`` and is never created by
``Base.metadata.create_all`` or Alembic autogenerate.
"""

from sqlalchemy import Boolean, Column, Float, Integer, MetaData, String, Table, Text

AGGREGATE_VIEW_NAME = "block_availability"

view_metadata = MetaData()

block_availability = Table(
    AGGREGATE_VIEW_NAME,
    view_metadata,
    Column("h3_res8_id", String(20), nullable=False),
    Column("block_geoid", String(15), nullable=False),
    Column("provider_id", String(20), nullable=False),
    Column("provider_name", Text, nullable=False),
    Column("brand_name", Text, nullable=True),
    Column("technology_code", Integer, nullable=False),
    Column("max_download_speed", Float(precision=24), nullable=False),
    Column("max_upload_speed", Float(precision=24), nullable=False),
    Column("low_latency", Boolean, nullable=False),
    Column("data_vintage", String(10), nullable=False),
)


def aggregate_view_select(release_filter: str) -> str:
    """SELECT body of the view, restricted to ``data_vintage = <release_filter>``.

    ``release_filter`` is spliced in as SQL: a quoted literal or a subquery.
    Only residential (R) and mixed (X) rows are aggregated; each
    (cell, block, provider, technology) group keeps the best speeds and ORs
    the low-latency flag.
    """
    return f"""
        SELECT
            h3_res8_id,
            block_geoid,
            provider_id,
            MIN(provider_name) AS provider_name,
            MIN(brand_name) AS brand_name,
            technology_code,
            MAX(max_download_speed) AS max_download_speed,
            MAX(max_upload_speed) AS max_upload_speed,
            BOOL_OR(low_latency) AS low_latency,
            data_vintage
        FROM broadband_availability
        WHERE business_residential_code IN ('R', 'X')
          AND data_vintage = {release_filter}
        GROUP BY h3_res8_id, block_geoid, provider_id, technology_code, data_vintage
        """


def aggregate_view_create(release_filter: str) -> list[str]:
    """CREATE statements for the view and its indexes."""
    view = AGGREGATE_VIEW_NAME
    return [
        f"CREATE MATERIALIZED VIEW {view} AS {aggregate_view_select(release_filter)}",
        f"CREATE UNIQUE INDEX idx_mv_h3_block_provider_tech ON {view} "
        "(h3_res8_id, block_geoid, provider_id, technology_code)",
        f"CREATE INDEX idx_mv_h3 ON {view} (h3_res8_id)",
        f"CREATE INDEX idx_mv_geoid ON {view} (block_geoid)",
    ]
