"""
Repository pattern for database operations.

Every query is scoped to an owner; a record belonging to another owner
behaves as if it does not exist.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tedexplorer.core.analysis.market_share import MarketShareCalculation, ValuedTender
from tedexplorer.core.logging import get_logger
from tedexplorer.core.query.models import SearchResult

from .models import MarketAnalysis, SavedTender

logger = get_logger("persistence")


# =============================================================================
# Errors
# =============================================================================


class RepositoryError(Exception):
    """Base exception for persistence errors."""


class DuplicateRecordError(RepositoryError):
    """A record with the same owner and source id already exists."""

    def __init__(self, owner: str, ted_id: str):
        super().__init__(f"Tender {ted_id} is already saved for {owner}")
        self.owner = owner
        self.ted_id = ted_id


class RecordNotFoundError(RepositoryError):
    """No record with this id for this owner."""


class ValidationError(RepositoryError):
    """A required field is missing or blank."""


# =============================================================================
# Saved Tender Repository
# =============================================================================


class SavedTenderRepository:
    """Repository for SavedTender CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, owner: str, tender_id: int) -> SavedTender:
        """Get a saved tender by ID.

        Raises:
            RecordNotFoundError: If the owner has no such tender
        """
        tender = self.session.get(SavedTender, tender_id)
        if tender is None or tender.owner != owner:
            raise RecordNotFoundError(f"Saved tender {tender_id} not found")
        return tender

    def get_by_ted_id(self, owner: str, ted_id: str) -> SavedTender | None:
        stmt = select(SavedTender).where(
            and_(
                SavedTender.owner == owner,
                SavedTender.ted_id == ted_id,
            )
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def save(
        self,
        owner: str,
        result: SearchResult,
        tender_value: float | None = None,
        currency: str = "EUR",
        notes: str | None = None,
        is_our_sector: bool = False,
    ) -> SavedTender:
        """Save a search result for ``owner``.

        Raises:
            DuplicateRecordError: If the owner already saved this notice
        """
        if self.get_by_ted_id(owner, result.id) is not None:
            raise DuplicateRecordError(owner, result.id)

        tender = SavedTender(
            owner=owner,
            ted_id=result.id,
            title=result.title,
            date=result.date,
            type=result.type,
            uri=result.uri or None,
            cpv_code=result.cpv_code or None,
            cpv_description=result.cpv_description,
            country=result.country or None,
            country_name=result.country_name,
            tender_value=tender_value,
            currency=currency.upper(),
            notes=notes,
            is_our_sector=is_our_sector,
        )
        try:
            # A lost race rolls back only this insert
            with self.session.begin_nested():
                self.session.add(tender)
        except IntegrityError as e:
            raise DuplicateRecordError(owner, result.id) from e
        logger.info("Saved tender %s as #%d", result.id, tender.id, extra={"owner": owner})
        return tender

    def list_for_owner(
        self,
        owner: str,
        our_sector_only: bool = False,
        limit: int | None = None,
    ) -> Sequence[SavedTender]:
        """List an owner's saved tenders, newest first."""
        stmt = select(SavedTender).where(SavedTender.owner == owner)
        if our_sector_only:
            stmt = stmt.where(SavedTender.is_our_sector == True)  # noqa: E712
        stmt = stmt.order_by(SavedTender.created_at.desc(), SavedTender.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.session.execute(stmt).scalars().all()

    def toggle_our_sector(self, owner: str, tender_id: int) -> SavedTender:
        """Flip the sector flag of one tender."""
        tender = self.get(owner, tender_id)
        tender.is_our_sector = not tender.is_our_sector
        self.session.flush()
        return tender

    def set_value(
        self,
        owner: str,
        tender_id: int,
        tender_value: float | None,
        currency: str | None = None,
    ) -> SavedTender:
        """Set or clear the monetary value of one tender."""
        tender = self.get(owner, tender_id)
        tender.tender_value = tender_value
        if currency:
            tender.currency = currency.upper()
        self.session.flush()
        return tender

    def delete(self, owner: str, tender_id: int) -> None:
        tender = self.get(owner, tender_id)
        self.session.delete(tender)
        self.session.flush()
        logger.info("Removed saved tender #%d", tender_id, extra={"owner": owner})

    def valued_tenders(self, owner: str) -> list[ValuedTender]:
        """The owner's tenders in the shape the market share calculation takes."""
        return [
            ValuedTender(
                id=str(t.id),
                value=t.tender_value,
                in_subset=bool(t.is_our_sector),
            )
            for t in self.list_for_owner(owner)
        ]


# =============================================================================
# Market Analysis Repository
# =============================================================================


class MarketAnalysisRepository:
    """Repository for stored market share calculations."""

    def __init__(self, session: Session):
        self.session = session

    def save(
        self,
        owner: str,
        name: str,
        calculation: MarketShareCalculation,
        description: str | None = None,
        cpv_codes: list[str] | None = None,
        countries: list[str] | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> MarketAnalysis:
        """Store a calculation under ``name``.

        Raises:
            ValidationError: If the name is blank
        """
        if not name or not name.strip():
            raise ValidationError("Analysis name is required")

        analysis = MarketAnalysis(
            owner=owner,
            analysis_name=name.strip(),
            description=(description or "").strip() or None,
            total_market_value=calculation.total_value,
            our_sector_value=calculation.subset_value,
            market_share_percentage=calculation.percentage,
            tender_count=calculation.tender_count,
            our_sector_count=calculation.subset_count,
            cpv_codes=cpv_codes or None,
            countries=countries or None,
            date_from=date_from,
            date_to=date_to,
        )
        self.session.add(analysis)
        self.session.flush()
        return analysis

    def get(self, owner: str, analysis_id: int) -> MarketAnalysis:
        analysis = self.session.get(MarketAnalysis, analysis_id)
        if analysis is None or analysis.owner != owner:
            raise RecordNotFoundError(f"Analysis {analysis_id} not found")
        return analysis

    def list_for_owner(self, owner: str, limit: int = 50) -> Sequence[MarketAnalysis]:
        """List an owner's analyses, newest first."""
        stmt = (
            select(MarketAnalysis)
            .where(MarketAnalysis.owner == owner)
            .order_by(MarketAnalysis.created_at.desc(), MarketAnalysis.id.desc())
            .limit(limit)
        )
        return self.session.execute(stmt).scalars().all()

    def delete(self, owner: str, analysis_id: int) -> None:
        self.session.delete(self.get(owner, analysis_id))
        self.session.flush()
