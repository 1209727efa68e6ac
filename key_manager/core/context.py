"""
Application context.

Everything a service needs (store handle, signing secret, key policy) is
collected here once at startup and handed to each service explicitly.
"""
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from key_manager.core.config import Settings, get_settings
from key_manager.core.database import Base, create_db_engine, create_session_factory
from key_manager.core.unit_of_work import UnitOfWork
from key_manager.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Store handle, secrets and policy values shared by the services."""
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    signing_secret: str
    key_prefix: str
    key_validity: timedelta
    credential_ttl: timedelta
    jwt_algorithm: str = "HS256"
    bcrypt_rounds: int = 12
    clock: Callable[[], datetime] = field(default=utcnow)

    def unit_of_work(self) -> UnitOfWork:
        return UnitOfWork(self.session_factory)

    def now(self) -> datetime:
        return self.clock()

    def create_schema(self) -> None:
        """Create missing tables (local dev / tests; production uses Alembic)."""
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def _resolve_signing_secret(settings: Settings) -> str:
    if settings.JWT_SECRET and settings.JWT_SECRET.strip():
        secret = settings.JWT_SECRET.strip()
        if len(secret) < 32:
            logger.warning("JWT_SECRET is shorter than 32 characters - use a stronger secret")
        return secret

    if settings.is_local:
        logger.warning(
            "JWT_SECRET not set - generated an ephemeral signing secret. "
            "Admin credentials will not survive a restart."
        )
        return secrets.token_urlsafe(48)

    raise ValueError("JWT_SECRET environment variable not set. Cannot sign admin credentials.")


def build_context(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AppContext:
    """
    Build the application context from settings.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        clock: Source of the current time (defaults to aware UTC now)

    Returns:
        AppContext with a fresh engine and session factory

    Raises:
        ValueError: If no signing secret is configured outside local environments
    """
    settings = settings or get_settings()
    signing_secret = _resolve_signing_secret(settings)

    engine = create_db_engine(settings)
    context = AppContext(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        signing_secret=signing_secret,
        key_prefix=settings.KEY_PREFIX,
        key_validity=timedelta(days=settings.KEY_VALIDITY_DAYS),
        credential_ttl=timedelta(seconds=settings.JWT_EXPIRY_SECONDS),
        jwt_algorithm=settings.JWT_ALGORITHM,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        clock=clock or utcnow,
    )
    logger.info(
        f"Application context ready (env={settings.APP_ENV}, "
        f"key validity={settings.KEY_VALIDITY_DAYS}d, credential ttl={settings.JWT_EXPIRY_SECONDS}s)"
    )
    return context
