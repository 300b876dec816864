"""
Search filter and result types.

SearchFilters is validated on construction; SearchResult and
SearchResponse are immutable records built from endpoint responses.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

CPV_CODE_PATTERN = re.compile(r"^\d{1,8}(-\d)?$")
COUNTRY_CODE_PATTERN = re.compile(r"^[A-Za-z]{2,3}$")


class NoticeType(str, Enum):
    """Procurement record stage."""

    NOTICE = "notice"
    TENDER = "tender"
    OTHER = "other"


TYPE_LABELS = {
    NoticeType.NOTICE.value: "Contract Notice",
    NoticeType.TENDER.value: "Contract Award",
    NoticeType.OTHER.value: "Other",
}


def type_label(value: str) -> str:
    """Human label for a type tag."""
    return TYPE_LABELS.get(value, TYPE_LABELS[NoticeType.OTHER.value])


# =============================================================================
# Filters
# =============================================================================


class SearchFilters(BaseModel):
    """Optional search constraints. A missing field means no constraint."""

    keywords: str | None = Field(default=None, description="Case-insensitive title substring")
    type: NoticeType | None = Field(default=None, description="notice or tender")
    date_from: date | None = Field(default=None, description="Inclusive lower publication date")
    date_to: date | None = Field(default=None, description="Inclusive upper publication date")
    cpv_code: str | None = Field(default=None, description="CPV code prefix")
    country: str | None = Field(default=None, description="Country code, matched exactly")
    page: int | None = Field(default=None, ge=1, description="1-based page number")
    page_size: int | None = Field(default=None, gt=0, description="Results per page")

    @field_validator("keywords", "cpv_code", "country", "date_from", "date_to", "type", mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Any:
        """Treat empty or whitespace-only strings as no constraint."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("keywords")
    @classmethod
    def strip_keywords(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("type")
    @classmethod
    def filterable_type(cls, v: NoticeType | None) -> NoticeType | None:
        if v is NoticeType.OTHER:
            raise ValueError("type filter must be 'notice' or 'tender'")
        return v

    @field_validator("cpv_code")
    @classmethod
    def cpv_code_format(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not CPV_CODE_PATTERN.match(v):
            raise ValueError("cpv_code must be digits, optionally followed by -<check digit>")
        return v

    @field_validator("country")
    @classmethod
    def country_code_format(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not COUNTRY_CODE_PATTERN.match(v):
            raise ValueError("country must be a 2 or 3 letter code")
        return v.upper()

    @model_validator(mode="after")
    def date_range_ordered(self) -> "SearchFilters":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self

    def active_fields(self) -> list[str]:
        """Names of constraint fields that are set (paging excluded)."""
        return [
            name
            for name in ("keywords", "type", "date_from", "date_to", "cpv_code", "country")
            if getattr(self, name) is not None
        ]

    def with_page(self, page: int, page_size: int | None = None) -> "SearchFilters":
        """Copy of these filters pointing at another page."""
        return self.model_copy(
            update={"page": page, "page_size": page_size if page_size is not None else self.page_size}
        )


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class SearchResult:
    """A single notice row mapped from a query binding."""

    id: str
    title: str
    date: str
    cpv_code: str
    cpv_description: str
    country: str
    country_name: str
    type: str
    uri: str

    @property
    def type_label(self) -> str:
        return type_label(self.type)


@dataclass(frozen=True)
class SearchResponse:
    """One page of results plus paging totals."""

    results: tuple[SearchResult, ...]
    total: int
    page: int
    page_size: int
    total_pages: int

    # Set when the page was produced by the synthetic fallback dataset
    is_fallback: bool = False
    fallback_reason: str | None = None

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` rows.

    Raises:
        ValueError: If page_size is not positive or total is negative
    """
    if page_size <= 0:
        raise ValueError("page_size must be > 0")
    if total < 0:
        raise ValueError("total must be >= 0")
    return math.ceil(total / page_size)


def page_window(page: int, page_size: int) -> tuple[int, int]:
    """LIMIT/OFFSET pair for a 1-based page.

    Raises:
        ValueError: If page < 1 or page_size <= 0
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size <= 0:
        raise ValueError("page_size must be > 0")
    return page_size, (page - 1) * page_size
