"""Database configuration and session management."""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from atsboost.config import settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# Engine is created on first use so the API and tests can start without a database
_engine = None
_SessionLocal = None


def get_engine():
    """Get or create database engine."""
    global _engine
    if _engine is None:
        if not settings.database_url:
            raise ValueError("DATABASE_URL not configured")
        if settings.database_url.startswith("sqlite"):
            _engine = create_engine(settings.database_url, connect_args={"check_same_thread": False})
        else:
            _engine = create_engine(
                settings.database_url,
                pool_pre_ping=True,  # Neon/Postgres drops idle connections
                pool_recycle=300,
            )
    return _engine


def get_session_factory():
    """Get or create session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for background tasks and CLI commands; rolls back on error."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Create all tables that do not exist yet."""
    from atsboost.db import tables  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
