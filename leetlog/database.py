"""
Database configuration and session management.
Supports both SQLite (local development) and PostgreSQL (production).
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database.url


def _is_postgresql(url: str) -> bool:
    return "postgresql" in url or "postgres" in url


# Configure engine based on database type
if _is_postgresql(DATABASE_URL):
    engine = create_engine(
        DATABASE_URL,
        echo=settings.database.echo,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
        pool_recycle=300,  # Recycle connections after 5 minutes
    )
elif "sqlite" in DATABASE_URL:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.database.echo,
        connect_args={"check_same_thread": False},  # Required for SQLite with FastAPI
    )
else:
    engine = create_engine(DATABASE_URL, echo=settings.database.echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_database_type() -> str:
    """Return a description of the current database type."""
    if _is_postgresql(DATABASE_URL):
        return "PostgreSQL"
    elif "sqlite" in DATABASE_URL:
        return "SQLite (local)"
    else:
        return "Unknown"


def init_db():
    """Initialize database tables."""
    from . import models  # noqa: F401  Import models to register them

    db_type = get_database_type()
    logger.info("Connecting to database: %s", db_type)

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Could not verify database connection")
        raise

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized (%s)", db_type)
