"""
Synthetic search results served when the endpoint is unavailable.

Only used when ``fallback_on_error`` is enabled. Rows are seeded from the
filters and their absolute position, so the same search always yields the
same pages and every row satisfies the filters it was generated for.
Responses carry ``is_fallback=True``.
"""

from __future__ import annotations

import hashlib
import random
from datetime import date, timedelta

from tedexplorer.core.query.models import (
    NoticeType,
    SearchFilters,
    SearchResponse,
    SearchResult,
    page_window,
    total_pages,
)

FALLBACK_TITLES = [
    "IT Services and Software Development Contract",
    "Construction of New Hospital Wing",
    "Supply of Medical Equipment and Devices",
    "Telecommunications Infrastructure Upgrade",
    "Energy Efficiency Renovation Project",
    "Transportation Services Contract",
    "Consultancy Services for Digital Transformation",
    "Security Services for Government Buildings",
    "Cleaning and Maintenance Services",
    "Office Supplies and Equipment Contract",
]

FALLBACK_CPV_CODES = [
    ("72000000", "IT services: consulting, software development, Internet and support"),
    ("45000000", "Construction work"),
    ("33000000", "Medical equipments, pharmaceuticals and personal care products"),
    ("32000000", "Radio, television, communication, telecommunication and related equipment"),
]

FALLBACK_COUNTRIES = [
    ("DE", "Germany"),
    ("FR", "France"),
    ("IT", "Italy"),
    ("ES", "Spain"),
]

# Synthetic dates fall in the year before this day unless filters say otherwise
ANCHOR_DATE = date(2024, 12, 31)
DATE_SPAN_DAYS = 365


def filters_seed(filters: SearchFilters) -> int:
    """Stable seed for a filter set, ignoring paging."""
    key = filters.model_dump_json(exclude={"page", "page_size"})
    return int(hashlib.sha256(key.encode("utf-8")).hexdigest()[:16], 16)


def _date_range(filters: SearchFilters) -> tuple[date, date]:
    lo = filters.date_from
    hi = filters.date_to
    if lo is None and hi is None:
        return ANCHOR_DATE - timedelta(days=DATE_SPAN_DAYS), ANCHOR_DATE
    if lo is None:
        return hi - timedelta(days=DATE_SPAN_DAYS), hi
    if hi is None:
        return lo, lo + timedelta(days=DATE_SPAN_DAYS)
    return lo, hi


def _pick_cpv(filters: SearchFilters, rng: random.Random) -> tuple[str, str]:
    if not filters.cpv_code:
        return rng.choice(FALLBACK_CPV_CODES)
    matching = [c for c in FALLBACK_CPV_CODES if c[0].startswith(filters.cpv_code)]
    if matching:
        return rng.choice(matching)
    code = filters.cpv_code if "-" in filters.cpv_code else filters.cpv_code.ljust(8, "0")
    return code, "Synthetic classification"


def _pick_country(filters: SearchFilters, rng: random.Random) -> tuple[str, str]:
    if not filters.country:
        return rng.choice(FALLBACK_COUNTRIES)
    for code, name in FALLBACK_COUNTRIES:
        if code == filters.country:
            return code, name
    return filters.country, "Unknown"


def synthetic_result(filters: SearchFilters, index: int, seed: int | None = None) -> SearchResult:
    """Row at 0-based ``index`` of the synthetic dataset for ``filters``."""
    if seed is None:
        seed = filters_seed(filters)
    rng = random.Random(seed + index)

    base_title = rng.choice(FALLBACK_TITLES)
    title = f"{base_title} - {filters.keywords}" if filters.keywords else base_title

    cpv_code, cpv_description = _pick_cpv(filters, rng)
    country, country_name = _pick_country(filters, rng)

    if filters.type:
        notice_type = NoticeType(filters.type).value
    else:
        notice_type = rng.choice([NoticeType.NOTICE.value, NoticeType.TENDER.value])

    lo, hi = _date_range(filters)
    day = lo + timedelta(days=rng.randint(0, (hi - lo).days))

    number = index + 1
    return SearchResult(
        id=f"mock-{number}",
        title=title,
        date=day.isoformat(),
        cpv_code=cpv_code,
        cpv_description=cpv_description,
        country=country,
        country_name=country_name,
        type=notice_type,
        uri=f"https://ted.europa.eu/udl?uri=TED:NOTICE:{number}:DATA",
    )


def synthetic_response(
    filters: SearchFilters,
    page: int,
    page_size: int,
    total: int,
    reason: str,
) -> SearchResponse:
    """A labelled fallback page."""
    limit, offset = page_window(page, page_size)
    seed = filters_seed(filters)
    end = min(offset + limit, total)

    results = tuple(synthetic_result(filters, i, seed) for i in range(offset, end))

    return SearchResponse(
        results=results,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
        is_fallback=True,
        fallback_reason=reason,
    )
