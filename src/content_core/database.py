"""Database engine, session factory and transaction scoping.

Nothing here is a module-level singleton: the application factory builds
the engine and session factory once and hands sessions to the services.
"""
import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger("content-core.database")


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the database engine for a URL.

    SQLite connections run in WAL mode (file databases) with foreign keys
    enforced, so ON DELETE CASCADE holds. In-memory SQLite shares a single
    connection across threads. Other backends get a conservative pool.

    Args:
        database_url: SQLAlchemy database URL
        echo: Log emitted SQL

    Returns:
        Configured Engine
    """
    if _is_sqlite(database_url):
        kwargs = {"connect_args": {"check_same_thread": False}}
        memory = _is_memory_sqlite(database_url)
        if memory:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            if not memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,          # Verify connections before using
        pool_size=3,                 # Base pool of 3 connections
        max_overflow=7,              # Allow up to 10 total connections
        pool_recycle=3600,           # Recycle connections every hour
        pool_timeout=30,             # Timeout after 30 seconds
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.debug("Database schema initialized")


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """
    Run a block of statements as one atomic unit.

    Commits when the block finishes and rolls back if it raises, so no
    partial write is ever observable.

    Args:
        db: Database session

    Yields:
        Session: the same session
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Yield a session from the factory and close it afterwards.

    Yields:
        Session: SQLAlchemy database session
    """
    db = factory()
    try:
        yield db
    finally:
        db.close()
