"""Database configuration and session management for User Service."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from services.users.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


def engine_options(database_url: str, debug: bool = False) -> dict[str, Any]:
    """Build create_engine() keyword arguments for a database URL.

    SQLite (tests, local runs) shares one connection across threads;
    server databases get a pre-pinged connection pool.
    """
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
            "echo": debug,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "echo": debug,
    }


settings = get_settings()

engine = create_engine(
    settings.users_database_url,
    **engine_options(settings.users_database_url, settings.debug),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, Any, None]:
    """
    Dependency that provides a database session.

    Yields a database session and ensures it is closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)
