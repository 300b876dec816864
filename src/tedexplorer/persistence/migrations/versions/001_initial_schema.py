"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2024-06-01 00:00:00.000000

"""
from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create saved tender and market analysis tables."""

    op.create_table(
        "saved_tenders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner", sa.String(length=200), nullable=False),
        sa.Column("ted_id", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=1000), nullable=False),
        sa.Column("date", sa.String(length=20), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=True),
        sa.Column("uri", sa.String(length=2000), nullable=True),
        sa.Column("cpv_code", sa.String(length=20), nullable=True),
        sa.Column("cpv_description", sa.String(length=500), nullable=True),
        sa.Column("country", sa.String(length=3), nullable=True),
        sa.Column("country_name", sa.String(length=200), nullable=True),
        sa.Column("tender_value", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="EUR"),
        sa.Column("is_our_sector", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner", "ted_id", name="uq_saved_tenders_owner_ted_id"),
    )
    op.create_index("ix_saved_tenders_owner", "saved_tenders", ["owner"])
    op.create_index("ix_saved_tenders_owner_sector", "saved_tenders", ["owner", "is_our_sector"])

    op.create_table(
        "market_analyses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner", sa.String(length=200), nullable=False),
        sa.Column("analysis_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("total_market_value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("our_sector_value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("market_share_percentage", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tender_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("our_sector_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cpv_codes", sa.JSON(), nullable=True),
        sa.Column("countries", sa.JSON(), nullable=True),
        sa.Column("date_from", sa.Date(), nullable=True),
        sa.Column("date_to", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_market_analyses_owner", "market_analyses", ["owner"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("market_analyses")
    op.drop_table("saved_tenders")
