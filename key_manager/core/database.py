"""
Database configuration and session management.

Uses SQLAlchemy 2.x style with DeclarativeBase. Engines and session factories
are built on demand from settings and owned by the application context.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from key_manager.core.config import Settings


class Base(DeclarativeBase):
    """Base class for all database models using SQLAlchemy 2.x style."""
    pass


def create_db_engine(settings: Settings) -> Engine:
    """
    Create an engine for the configured store.

    Server databases get a bounded QueuePool (no overflow) so callers beyond
    DB_POOL_SIZE wait for a free connection. SQLite keeps SQLAlchemy's default
    pool and only needs cross-thread access enabled.
    """
    database_url = settings.sqlalchemy_database_uri

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def is_unique_violation(exc: IntegrityError, column: str) -> bool:
    """
    Check whether an IntegrityError was raised by a unique constraint on `column`.

    Driver messages differ (SQLite: "UNIQUE constraint failed: users.email",
    MySQL: "Duplicate entry ... for key 'users.email'", Postgres: "duplicate key
    value violates unique constraint \"ix_users_email\"") but all name the column.
    """
    message = str(exc.orig if exc.orig is not None else exc).lower()
    is_unique = "unique" in message or "duplicate" in message
    return is_unique and column.lower() in message
