"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Callable, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from schooldesk.config import get_settings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, configured for SQLite when the URL points at one.

    In-memory SQLite uses StaticPool so every session sees the same database.
    Foreign keys are switched on for SQLite so ON DELETE CASCADE works.

    Args:
        database_url: SQLAlchemy database URL (e.g., "sqlite:///./schooldesk.db")
        echo: Log SQL statements

    Returns:
        Configured Engine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to engine."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    from schooldesk.models import Base

    Base.metadata.create_all(engine)
    logger.info("Database schema ready (%s)", engine.url.render_as_string(hide_password=True))


_settings = get_settings()
engine = create_db_engine(_settings.database_url, echo=_settings.database_echo)
SessionLocal = create_session_factory(engine)


@contextmanager
def session_scope(session_factory: SessionFactory | None = None) -> Generator[Session, None, None]:
    """Open a session and run the block as one transaction.

    Commits when the block finishes, rolls back and re-raises on any error.

    Example:
        ```python
        with session_scope() as session:
            session.add(SchoolClass(name="Grade 1"))
        ```
    """
    factory = session_factory or SessionLocal
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "engine",
    "SessionLocal",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
