"""SPARQL query building and result mapping."""

from .builder import (
    build_count_query,
    build_data_query,
    build_filter_clauses,
    build_query,
    escape_literal,
    paginate,
)
from .mapping import map_binding, map_bindings, parse_count
from .models import (
    NoticeType,
    SearchFilters,
    SearchResponse,
    SearchResult,
    TYPE_LABELS,
    page_window,
    total_pages,
    type_label,
)

__all__ = [
    # Types
    "NoticeType",
    "SearchFilters",
    "SearchResult",
    "SearchResponse",
    "TYPE_LABELS",
    "type_label",
    # Paging
    "page_window",
    "total_pages",
    # Builder
    "build_query",
    "build_count_query",
    "build_data_query",
    "build_filter_clauses",
    "escape_literal",
    "paginate",
    # Mapping
    "map_binding",
    "map_bindings",
    "parse_count",
]
