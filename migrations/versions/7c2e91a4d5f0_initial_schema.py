"""Initial schema: maternity_units and sync_metadata.

Revision ID: 7c2e91a4d5f0
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7c2e91a4d5f0"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "maternity_units",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("cqc_location_id", sa.String(length=20), nullable=False),
        sa.Column("cqc_provider_id", sa.String(length=20), nullable=True),
        sa.Column("ods_code", sa.String(length=20), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("provider_name", sa.String(length=255), nullable=True),
        sa.Column("unit_type", sa.String(length=30), nullable=False),
        sa.Column("is_nhs", sa.Boolean(), nullable=False),
        sa.Column("address_line_1", sa.String(length=255), nullable=True),
        sa.Column("address_line_2", sa.String(length=255), nullable=True),
        sa.Column("town_city", sa.String(length=100), nullable=True),
        sa.Column("county", sa.String(length=100), nullable=True),
        sa.Column("postcode", sa.Text(), nullable=True),
        sa.Column("region", sa.String(length=100), nullable=True),
        sa.Column("local_authority", sa.String(length=100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("overall_rating", sa.String(length=30), nullable=True),
        sa.Column("rating_safe", sa.String(length=30), nullable=True),
        sa.Column("rating_effective", sa.String(length=30), nullable=True),
        sa.Column("rating_caring", sa.String(length=30), nullable=True),
        sa.Column("rating_responsive", sa.String(length=30), nullable=True),
        sa.Column("rating_well_led", sa.String(length=30), nullable=True),
        sa.Column("maternity_rating", sa.String(length=30), nullable=True),
        sa.Column("maternity_rating_date", sa.String(length=10), nullable=True),
        sa.Column("last_inspection_date", sa.String(length=10), nullable=True),
        sa.Column("cqc_report_url", sa.String(length=255), nullable=True),
        sa.Column("place_cleanliness", sa.Float(), nullable=True),
        sa.Column("place_food", sa.Float(), nullable=True),
        sa.Column("place_privacy_dignity_wellbeing", sa.Float(), nullable=True),
        sa.Column("place_condition_appearance", sa.Float(), nullable=True),
        sa.Column("place_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "registration_status",
            sa.String(length=30),
            server_default="Registered",
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("cqc_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.UniqueConstraint("cqc_location_id"),
        if_not_exists=True,
    )

    # Append-only: the application never issues UPDATE or DELETE here.
    op.create_table(
        "sync_metadata",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "attempted_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("succeeded_through", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("record_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("error_detail", sa.Text(), nullable=True),
        sa.CheckConstraint(
            "status IN ('success', 'completed_with_errors', 'failed')",
            name="ck_sync_metadata_status",
        ),
        sa.CheckConstraint(
            "status <> 'failed' OR succeeded_through IS NULL",
            name="ck_sync_metadata_failed_has_no_watermark",
        ),
        if_not_exists=True,
    )

    op.create_index(
        "ix_maternity_units_unit_type",
        "maternity_units",
        ["unit_type"],
        if_not_exists=True,
    )
    op.create_index(
        "ix_maternity_units_region",
        "maternity_units",
        ["region"],
        if_not_exists=True,
    )
    op.create_index(
        "idx_sync_metadata_status_through",
        "sync_metadata",
        ["status", sa.text("succeeded_through DESC")],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index("idx_sync_metadata_status_through", table_name="sync_metadata", if_exists=True)
    op.drop_index("ix_maternity_units_region", table_name="maternity_units", if_exists=True)
    op.drop_index("ix_maternity_units_unit_type", table_name="maternity_units", if_exists=True)
    op.drop_table("sync_metadata", if_exists=True)
    op.drop_table("maternity_units", if_exists=True)
