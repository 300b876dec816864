"""
Mapping of SPARQL bindings to search records.
"""

from __future__ import annotations

from typing import Iterable

from tedexplorer.core.endpoint.base import Binding, QueryExecutionError, QueryPhase

from .builder import COUNT_VARIABLE
from .models import NoticeType, SearchResult

UNTITLED = "Untitled Notice"
UNKNOWN_DATE = "unknown"
NO_DESCRIPTION = "No description available"
UNKNOWN_COUNTRY = "Unknown"


def binding_value(binding: Binding, name: str) -> str | None:
    """Value of a bound variable, or None when unbound."""
    cell = binding.get(name)
    if not isinstance(cell, dict):
        return None
    value = cell.get("value")
    if value is None:
        return None
    return str(value)


def trailing_segment(value: str | None) -> str:
    """Last path segment of an IRI; plain values pass through."""
    if not value:
        return ""
    return value.rstrip("/").rsplit("/", 1)[-1].rsplit("#", 1)[-1]


def map_binding(binding: Binding, position: int) -> SearchResult:
    """Map one binding to a SearchResult.

    Args:
        binding: Solution from the data query
        position: Absolute 1-based row number, used for a missing id
    """
    notice = binding_value(binding, "notice")
    date_value = binding_value(binding, "date")
    type_value = binding_value(binding, "type")
    if type_value not in {t.value for t in NoticeType}:
        type_value = NoticeType.NOTICE.value

    return SearchResult(
        id=trailing_segment(notice) or f"result-{position}",
        title=binding_value(binding, "title") or UNTITLED,
        date=date_value.split("T")[0] if date_value else UNKNOWN_DATE,
        cpv_code=trailing_segment(binding_value(binding, "cpvCode")),
        cpv_description=binding_value(binding, "cpvDescription") or NO_DESCRIPTION,
        country=trailing_segment(binding_value(binding, "country")),
        country_name=binding_value(binding, "countryName") or UNKNOWN_COUNTRY,
        type=type_value,
        uri=notice or "",
    )


def map_bindings(bindings: Iterable[Binding], offset: int = 0) -> list[SearchResult]:
    return [map_binding(b, offset + i + 1) for i, b in enumerate(bindings)]


def parse_count(bindings: list[Binding], endpoint: str | None = None) -> int:
    """Total from a count query's bindings; no bindings means zero.

    Raises:
        QueryExecutionError: If the total is not a non-negative integer
    """
    if not bindings:
        return 0
    raw = binding_value(bindings[0], COUNT_VARIABLE)
    if raw is None:
        return 0
    try:
        total = int(float(raw))
    except (ValueError, OverflowError) as e:
        raise QueryExecutionError(
            QueryPhase.COUNT,
            f"non-numeric total {raw!r}",
            endpoint=endpoint,
            cause=e,
        ) from e
    if total < 0:
        raise QueryExecutionError(QueryPhase.COUNT, f"negative total {total}", endpoint=endpoint)
    return total
