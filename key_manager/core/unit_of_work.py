"""
Transactional unit of work over a single SQLAlchemy session.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Context manager wrapping one session and its transaction.

    Nothing is persisted unless commit() is called inside the block. Leaving
    the block by an exception, or without committing, rolls back. The session
    is closed, and its pooled connection released, on every exit path.

    Usage:
        with UnitOfWork(session_factory) as uow:
            uow.session.add(obj)
            uow.commit()
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self._committed = False

    def __enter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self._committed = False
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None or not self._committed:
                self._rollback()
        finally:
            self.session.close()
            self.session = None
        return False

    def commit(self) -> None:
        if self.session is None:
            raise RuntimeError("UnitOfWork used outside its 'with' block")
        self.session.commit()
        self._committed = True

    def _rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as e:
            # The original failure is already propagating; the rollback error is secondary
            logger.warning(f"Rollback failed while discarding unit of work: {e}")
