"""
SQLAlchemy ORM models for TED Explorer.

Defines the database schema:
- SavedTenders: search results an owner chose to keep, with value and sector flag
- MarketAnalyses: stored market share calculations
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        dict[str, Any]: JSON,
    }


# =============================================================================
# Mixins
# =============================================================================


class TimestampMixin:
    """Mixin providing created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        default=None,
        onupdate=utcnow,
        nullable=True,
    )


# =============================================================================
# Saved Tender Model
# =============================================================================


class SavedTender(Base, TimestampMixin):
    """A search result kept by an owner for market analysis."""

    __tablename__ = "saved_tenders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    # Source notice
    ted_id: Mapped[str] = mapped_column(String(200), nullable=False)
    title: Mapped[str] = mapped_column(String(1000), nullable=False)
    date: Mapped[str] = mapped_column(String(20), nullable=False)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    uri: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # Classification
    cpv_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cpv_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    country: Mapped[str | None] = mapped_column(String(3), nullable=True)
    country_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Value
    tender_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="EUR", nullable=False)

    is_our_sector: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("owner", "ted_id", name="uq_saved_tenders_owner_ted_id"),
        Index("ix_saved_tenders_owner_sector", "owner", "is_our_sector"),
    )

    def __repr__(self) -> str:
        return f"<SavedTender(id={self.id}, ted_id='{self.ted_id}', owner='{self.owner}')>"


# =============================================================================
# Market Analysis Model
# =============================================================================


class MarketAnalysis(Base, TimestampMixin):
    """A stored market share calculation."""

    __tablename__ = "market_analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    analysis_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Results
    total_market_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    our_sector_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    market_share_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tender_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    our_sector_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Scope the analysis was taken over
    cpv_codes: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    countries: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    date_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<MarketAnalysis(id={self.id}, name='{self.analysis_name}')>"
