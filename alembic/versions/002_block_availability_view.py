"""Create the block_availability materialized view.

Initially scoped to whichever release is active (none on a fresh database);
activation drops and recreates it for the new release from the same SQL.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""

from alembic import op

from broadband_api.models.block_availability import AGGREGATE_VIEW_NAME, aggregate_view_create

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

ACTIVE_RELEASE = "(SELECT vintage_id FROM data_vintages WHERE is_active LIMIT 1)"


def upgrade() -> None:
    for statement in aggregate_view_create(ACTIVE_RELEASE):
        op.execute(statement)


def downgrade() -> None:
    op.execute(f"DROP MATERIALIZED VIEW IF EXISTS {AGGREGATE_VIEW_NAME}")
