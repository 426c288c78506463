"""
FastAPI application initialization
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from api.routes import health, lockers, vendors
from core.config import settings
from core.database import create_engine, create_session_factory
from core.logging import setup_logging
from ingestion.scheduler import SyncScheduler
import logging

logger = logging.getLogger(__name__)


def create_app(session_factory=None, enable_scheduler=None) -> FastAPI:
    """
    Build the API application.

    Without a session factory one is built from DATABASE_URL at startup.
    The daily sync runs in-process when SCHEDULER_ENABLED is set.
    """
    enable_scheduler = settings.SCHEDULER_ENABLED if enable_scheduler is None else enable_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Parcel Locker API")
        logger.info(f"Environment: {settings.ENVIRONMENT}")

        engine = None
        if app.state.session_factory is None:
            engine = create_engine()
            app.state.session_factory = create_session_factory(engine)
            logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

        scheduler = None
        if enable_scheduler:
            scheduler = SyncScheduler(session_factory=app.state.session_factory)
            scheduler.start()

        yield

        logger.info("Shutting down Parcel Locker API")
        if scheduler is not None:
            await scheduler.stop()
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="Parcel Locker API",
        description="Aggregated parcel locker and pickup point locations",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(lockers.router)
    app.include_router(vendors.router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Parcel Locker API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "lockers": "/api/lockers",
                "vendors": "/api/vendors",
                "types": "/api/types"
            }
        }

    return app


setup_logging()
app = create_app()
