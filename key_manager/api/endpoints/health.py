"""
Health check endpoints for monitoring and load balancers.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from key_manager.api.deps import get_context
from key_manager.core.context import AppContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness: returns immediately without touching the database."""
    return {"status": "ok"}


@router.get("/health/db")
def health_check_db(context: AppContext = Depends(get_context)):
    """
    Readiness: verifies the store answers SELECT 1.

    Returns 503 when the database is unreachable.
    """
    try:
        with context.session_factory() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        trace_id = str(uuid.uuid4())
        logger.warning(f"[{trace_id}] Database health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "status": "unhealthy",
                "database": "disconnected",
                "trace_id": trace_id,
            },
        )

    return {
        "status": "ok",
        "database": "connected",
        "environment": context.settings.APP_ENV,
    }
