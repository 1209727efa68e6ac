"""
Main FastAPI application entry point.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from key_manager.api.errors import ServiceErrorException, request_validation_handler, service_error_handler
from key_manager.api.router import api_router
from key_manager.core.config import Settings, get_settings
from key_manager.core.context import AppContext, build_context
from key_manager.core.errors import ErrorKind
from key_manager.core.logging_config import setup_logging
from key_manager.middleware.request_logging import RequestLoggingMiddleware

# Import all models so they register with Base.metadata before create_all
from key_manager.models import Admin, APIKey, User  # noqa: F401

logger = logging.getLogger(__name__)

PUBLIC_ENDPOINTS = ["/admin/register", "/admin/login", "/user/register", "/validate-apikey"]

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def run_migrations(context: AppContext) -> None:
    """Upgrade the configured database to the latest Alembic revision."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.attributes["sqlalchemy.url"] = context.settings.sqlalchemy_database_uri
    # Keep the handlers installed by setup_logging
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, "head")


def prepare_database(context: AppContext) -> None:
    """Create or migrate the schema, then check connectivity. Failures are logged, not fatal."""
    if context.settings.RUN_MIGRATIONS:
        try:
            logger.info("[MIGRATION] Running Alembic migrations...")
            run_migrations(context)
            logger.info("[MIGRATION] Alembic migrations completed (or already up-to-date)")
        except Exception as e:
            trace_id = str(uuid.uuid4())
            logger.warning(f"[MIGRATION] [{trace_id}] Alembic migration failed: {e}", exc_info=True)
    else:
        try:
            context.create_schema()
            logger.info("Database tables created/verified successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create database tables: {e}", exc_info=True)

    # Don't fail startup - /health/db reports the problem
    try:
        with context.session_factory() as session:
            session.execute(text("SELECT 1"))
        logger.info("Database connectivity verified")
    except SQLAlchemyError as e:
        trace_id = str(uuid.uuid4())
        logger.error(f"[{trace_id}] Database connectivity test failed: {e}", exc_info=True)


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        context: Prebuilt application context; built from settings when omitted

    Returns:
        Configured FastAPI app with the context on app.state.context
    """
    if context is not None:
        settings = context.settings
    settings = settings or get_settings()
    setup_logging(settings)
    context = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting up {settings.APP_NAME}...")
        prepare_database(app.state.context)
        yield
        logger.info(f"Shutting down {settings.APP_NAME}...")
        app.state.context.dispose()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Issue, store and validate API keys for registered users",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceErrorException, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors with trace_id."""
        trace_id = getattr(request.state, "trace_id", str(uuid.uuid4()))
        logger.error(f"[{trace_id}] Unhandled exception: {type(exc).__name__}: {exc}", exc_info=True)

        if isinstance(exc, SQLAlchemyError):
            error_type = ErrorKind.STORAGE_ERROR.value
            message = "Database error"
        else:
            error_type = type(exc).__name__
            message = str(exc) if settings.DEBUG else "An unexpected error occurred"

        return JSONResponse(
            status_code=500,
            content={"error": error_type, "message": message, "trace_id": trace_id},
        )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Server status."""
        return {
            "message": f"{settings.APP_NAME} server is running.",
            "status": "OK",
            "endpoints": PUBLIC_ENDPOINTS,
        }

    if settings.STATIC_DIR and Path(settings.STATIC_DIR).is_dir():
        app.mount("/static", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
        logger.info(f"Serving static files from {settings.STATIC_DIR} at /static")

    return app


def run() -> None:
    """
    Console entry point: serve the app with uvicorn.

    The app is built by the factory inside the server process. From the CLI:
        uvicorn key_manager.main:create_app --factory
    """
    import uvicorn

    settings = get_settings()
    logger.info(f"Server listening on http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(
        "key_manager.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
