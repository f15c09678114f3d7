"""create visitor_records and visitor_stats_snapshot tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "visitor_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False, comment="Calendar month, 1-12"),
        sa.Column(
            "country",
            sa.String(length=120),
            nullable=False,
            comment="Origin country, normalized to the configured allow-list",
        ),
        sa.Column("visitors", sa.BigInteger(), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False,
                  comment="primary, secondary, external"),
        sa.Column("official", sa.Boolean(), nullable=False),
        sa.Column("observed_at", sa.DateTime(timezone=True), nullable=False,
                  comment="When the acquisition tier produced this value (UTC)"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_visitor_records")),
        sa.UniqueConstraint("year", "month", "country", name=op.f("uq_visitor_records_year_month_country")),
        sa.CheckConstraint("month >= 1 AND month <= 12", name=op.f("ck_visitor_records_month_range")),
        sa.CheckConstraint("visitors >= 0", name=op.f("ck_visitor_records_visitors_non_negative")),
    )
    op.create_index(op.f("ix_visitor_records_year_month"), "visitor_records", ["year", "month"], unique=False)
    op.create_index(op.f("ix_visitor_records_country"), "visitor_records", ["country"], unique=False)

    op.create_table(
        "visitor_stats_snapshot",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("total_visitors", sa.BigInteger(), nullable=False,
                  comment="Summed arrivals for the current (year, month)"),
        sa.Column("monthly_growth_percent", sa.Float(), nullable=False),
        sa.Column("top_country", sa.String(length=120), nullable=False),
        sa.Column("last_stats_update", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_ingest_update", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_visitor_stats_snapshot")),
        sa.CheckConstraint("id = 1", name=op.f("ck_visitor_stats_snapshot_single_row")),
    )


def downgrade() -> None:
    op.drop_table("visitor_stats_snapshot")
    op.drop_index(op.f("ix_visitor_records_country"), table_name="visitor_records")
    op.drop_index(op.f("ix_visitor_records_year_month"), table_name="visitor_records")
    op.drop_table("visitor_records")
