"""Database package: engine, session factory, init_db(), get_session()."""

import threading
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from uid_ops.config import DATABASE_URL
from uid_ops.db.base import Base
from uid_ops.errors import StorageError

# Import all models so Base.metadata has all tables
from uid_ops.db.models import BinRecord, IntakeRecord, WeeklyPlan  # noqa: F401

_init_lock = threading.Lock()
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _get_engine(url: str) -> Engine:
    """Create engine; SQLite connections may be used from executor threads."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if _is_memory_sqlite(url):
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, echo=False, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        if not _is_memory_sqlite(url):
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_db(url: str | None = None, reset: bool = False) -> None:
    """Create engine and tables once. ``reset`` disposes any previous engine first."""
    global _engine, _SessionLocal
    with _init_lock:
        if _SessionLocal is not None and not reset:
            return
        if _engine is not None:
            _engine.dispose()
        _engine = _get_engine(url or DATABASE_URL)
        Base.metadata.create_all(bind=_engine)
        _SessionLocal = sessionmaker(bind=_engine, autocommit=False, autoflush=False, expire_on_commit=False)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Context manager yielding a DB session. Calls init_db() on first use.

    Commits on exit and rolls back on any exception; driver/ORM failures
    surface as StorageError.
    """
    init_db()
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(str(e), details={"type": type(e).__name__}) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
