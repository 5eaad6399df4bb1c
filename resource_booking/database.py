"""
Database configuration and session management.

Provides:
- Engine creation with per-dialect configuration
- Cached session factory for the configured database URL
- get_db_context() for transactional units of work
- Database initialization utilities

Only used when STORAGE_BACKEND=sqlalchemy.
"""

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from resource_booking.config import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine configured for the database type.

    Args:
        database_url: SQLAlchemy connection URL
        echo: Log SQL statements

    Returns:
        Engine: configured SQLAlchemy engine
    """
    if "sqlite" in database_url.lower():
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},  # Allow multiple threads (needed for FastAPI)
            poolclass=StaticPool,  # Single shared connection (keeps :memory: databases alive)
            echo=echo,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable foreign key constraints in SQLite."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        pool_size=5,  # Maximum number of connections in pool
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using them
        echo=echo,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to an engine."""
    return sessionmaker(
        autocommit=False,  # Explicit commits required
        autoflush=False,  # Don't flush automatically before queries
        expire_on_commit=False,  # Records are mapped to entities after commit
        bind=engine,
    )


@lru_cache()
def get_engine() -> Engine:
    """Engine for the configured DATABASE_URL (created once)."""
    settings = get_settings()
    if settings.is_production:
        settings.validate_production_config()
    return build_engine(settings.database_url, echo=settings.log_level == "DEBUG")


@lru_cache()
def get_session_factory() -> sessionmaker:
    """Session factory for the configured engine (created once)."""
    return build_session_factory(get_engine())


@contextmanager
def get_db_context(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for a transactional unit of work.

    Usage:
        with get_db_context() as db:
            record = db.get(ResourceRecord, resource_id)
            record.status = "booked"
            # Automatic commit on context exit

    Args:
        factory: Session factory to use (defaults to the configured one)

    Yields:
        Session: SQLAlchemy database session
    """
    db = (factory or get_session_factory())()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Initialize database by creating all tables.

    Args:
        engine: Engine to create tables on (defaults to the configured one)
    """
    from resource_booking.models import Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database tables created successfully")


def drop_all_tables(engine: Optional[Engine] = None) -> None:
    """
    Drop all tables from the database.

    WARNING: This will delete all data. Primarily for testing.
    """
    from resource_booking.models import Base

    logger.warning("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine or get_engine())
    logger.info("All database tables dropped")


def check_connection(engine: Optional[Engine] = None) -> bool:
    """
    Test database connection.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
