"""
RideHail - Database Configuration

SQLModel database setup with connection pooling.
Supports PostgreSQL (production) and SQLite (development).

Usage:
    from ridehail.database import get_engine, init_db

    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)  # Creates tables
"""

from typing import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine


SessionFactory = Callable[[], Session]


def get_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create SQLAlchemy engine with appropriate configuration.

    Args:
        database_url: Connection string
        echo: Log SQL statements

    Returns:
        SQLAlchemy Engine
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory DB
            return create_engine(
                database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool,
            )
        return create_engine(database_url, echo=echo, connect_args=connect_args)

    # PostgreSQL configuration with connection pooling
    return create_engine(
        database_url,
        echo=echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def init_db(engine: Engine) -> None:
    """
    Initialize database tables.

    Safe to call multiple times (uses CREATE IF NOT EXISTS).
    """
    # Import models to register them with SQLModel
    from ridehail.accounts.models import Rider, Captain  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session_factory(engine: Engine, expire_on_commit: bool = False) -> SessionFactory:
    """
    Create a session factory bound to engine.

    Objects stay readable after the session closes, since handlers use
    them after the store has returned.
    """
    def session_factory() -> Session:
        return Session(engine, expire_on_commit=expire_on_commit)

    return session_factory
