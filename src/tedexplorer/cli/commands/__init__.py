"""CLI command modules."""

from . import analysis, db, search, tenders

__all__ = [
    "analysis",
    "db",
    "search",
    "tenders",
]
