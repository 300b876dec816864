"""Database persistence layer."""

from .db import create_db_engine, get_engine, get_session, init_db
from .models import Base, MarketAnalysis, SavedTender
from .repo import (
    DuplicateRecordError,
    MarketAnalysisRepository,
    RecordNotFoundError,
    RepositoryError,
    SavedTenderRepository,
    ValidationError,
)

__all__ = [
    "create_db_engine",
    "get_engine",
    "get_session",
    "init_db",
    "Base",
    "SavedTender",
    "MarketAnalysis",
    "SavedTenderRepository",
    "MarketAnalysisRepository",
    "RepositoryError",
    "DuplicateRecordError",
    "RecordNotFoundError",
    "ValidationError",
]
