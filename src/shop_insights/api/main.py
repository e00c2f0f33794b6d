"""
FastAPI application entry point for multi-tenant Shop Insights.
"""

from pathlib import Path
from dotenv import load_dotenv

# src/shop_insights/api/main.py -> project root
env_file = Path(__file__).parent.parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file)

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shop_insights.api.routes import health, tenants, ingest, metrics
from shop_insights.api.middleware.error_handler import (
    ErrorHandlerMiddleware,
    register_exception_handlers,
)
from shop_insights.database.connection import Database
from shop_insights.services.scheduler import SyncScheduler, run_sync_cycle
from shop_insights.services.sync_service import SyncService, ClientFactory
from shop_insights.utils.config import Settings, get_config
from shop_insights.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None,
               database: Optional[Database] = None,
               client_factory: Optional[ClientFactory] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (defaults to the loaded settings)
        database: Pre-built database handle; when omitted one is created at
            startup from settings.database_url and disposed at shutdown
        client_factory: Commerce client factory override for the sync service
    """
    settings = settings or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        setup_logging()
        logger.info("Starting Shop Insights API...")

        owns_database = database is None
        db_handle = database or Database(settings.database_url, echo=settings.database_echo)
        db_handle.create_all()

        sync_service = SyncService(db_handle, client_factory=client_factory)
        app.state.database = db_handle
        app.state.sync_service = sync_service

        scheduler = None
        if settings.scheduler.enabled:
            scheduler = SyncScheduler(
                lambda: run_sync_cycle(sync_service),
                interval_seconds=settings.scheduler.interval_seconds,
            )
            scheduler.start()
        else:
            logger.info("Automatic sync disabled")
        app.state.scheduler = scheduler

        logger.info("API started successfully")

        yield

        logger.info("Shutting down Shop Insights API...")
        if scheduler is not None:
            await scheduler.stop()
        if owns_database:
            db_handle.dispose()

    app = FastAPI(
        title="Shop Insights API",
        description="Multi-tenant commerce analytics backend",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(ErrorHandlerMiddleware)
    # Outermost, so converted 500s carry CORS headers too.
    # Outside production any origin is accepted.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins if settings.is_production else ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(tenants.router, prefix="/api/tenants", tags=["Tenants"])
    app.include_router(ingest.router, prefix="/api/ingest", tags=["Ingestion"])
    app.include_router(metrics.router, prefix="/api/metrics", tags=["Metrics"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "name": "Shop Insights API",
            "status": "operational",
            "docs": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "shop_insights.api.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.debug_mode,
    )
