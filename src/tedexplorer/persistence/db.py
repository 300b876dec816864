"""
Engine and session management.

The CLI binds one process-wide engine through ``init_db`` or ``get_engine``;
tests build throwaway engines with ``create_db_engine`` instead.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

DEFAULT_DATABASE_URL = "sqlite:///data/tedexplorer.db"

SQLITE_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
)

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


# =============================================================================
# Engines
# =============================================================================


def _apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # pysqlite's own BEGIN handling breaks SAVEPOINT; _begin_sqlite emits BEGIN instead
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def _begin_sqlite(connection) -> None:
    connection.exec_driver_sql("BEGIN")


def create_db_engine(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """Build an engine for ``url`` without touching the global one.

    File-backed SQLite databases get their parent directory created;
    ``sqlite://`` stays in memory.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_size=5, max_overflow=10, pool_pre_ping=True)

    if parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _apply_sqlite_pragmas)
    event.listen(engine, "begin", _begin_sqlite)
    return engine


def get_engine(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """The process-wide engine, created on first use.

    Later calls return the existing engine whatever ``url`` they pass;
    call ``dispose_engine`` first to switch databases.
    """
    global _engine, _session_factory

    if _engine is None:
        _engine = create_db_engine(url, echo=echo)
        _session_factory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
    return _engine


def dispose_engine() -> None:
    """Close the process-wide engine's connections and forget it."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


# =============================================================================
# Sessions
# =============================================================================


@contextmanager
def get_session() -> Iterator[Session]:
    """Unit of work on the process-wide engine.

    Commits when the block exits normally and rolls back if it raises.

    Usage:
        with get_session() as session:
            SavedTenderRepository(session).list_for_owner("me")
    """
    if _session_factory is None:
        get_engine()
    assert _session_factory is not None

    with _session_factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


# =============================================================================
# Schema
# =============================================================================


def init_db(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> None:
    """Create missing tables. Use the alembic migrations to change existing ones."""
    Base.metadata.create_all(bind=get_engine(url, echo=echo))


def drop_db(url: str = DEFAULT_DATABASE_URL) -> None:
    """Drop every table. All saved data is lost."""
    Base.metadata.drop_all(bind=get_engine(url))
