"""Search execution, fallback data and session ordering."""

from .fallback import synthetic_response, synthetic_result
from .service import SearchService, SearchSession, get_metadata

__all__ = [
    "SearchService",
    "SearchSession",
    "get_metadata",
    "synthetic_response",
    "synthetic_result",
]
