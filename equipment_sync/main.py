"""
FastAPI application entry point for the Equipment Status Synchronization service.

This is the backend for:
- Equipment status changes with cascading fault report updates
- Fault reporting and repair lifecycle
- Diagnosis and repair of cross-entity drift
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .config import get_settings
from .container import ServiceContainer, build_container

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format=settings.log_format,
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Manages startup and shutdown tasks.
    """
    from .infrastructure.database import DatabaseManager, init_db
    from .infrastructure.messaging import RedisStreamManager
    from .workers import ReconciliationWorker

    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.sync.store_backend == 'sql':
        try:
            await init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    if getattr(app.state, 'container', None) is None:
        app.state.container = build_container(settings)

    worker: Optional[ReconciliationWorker] = None
    if settings.reconciler.schedule_enabled:
        worker = ReconciliationWorker(
            app.state.container.reconciler,
            interval_seconds=settings.reconciler.interval_seconds,
            mode=settings.reconciler.mode,
        )
        await worker.start()
    app.state.reconciliation_worker = worker

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if worker is not None:
        await worker.stop()
    await DatabaseManager.close()
    await RedisStreamManager.close()
    logger.info("Shutdown complete")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.

    Args:
        container: Prebuilt services; built during startup when omitted.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Equipment Status Sync API - status transitions, cascades and reconciliation",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.container = container

    # Register exception handlers
    register_exception_handlers(app)

    # Register routes
    register_routes(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    from .domain.exceptions import (
        DomainException,
        EntityNotFoundException,
        EntityStoreException,
        IllegalTransitionException,
        SyncInProgressException,
    )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=exc.to_dict(),
        )

    @app.exception_handler(EntityNotFoundException)
    async def not_found_handler(request: Request, exc: EntityNotFoundException):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=exc.to_dict(),
        )

    @app.exception_handler(IllegalTransitionException)
    async def illegal_transition_handler(request: Request, exc: IllegalTransitionException):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=exc.to_dict(),
        )

    @app.exception_handler(SyncInProgressException)
    async def sync_in_progress_handler(request: Request, exc: SyncInProgressException):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=exc.to_dict(),
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(EntityStoreException)
    async def store_error_handler(request: Request, exc: EntityStoreException):
        logger.error(f"Entity store failure: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")

        if settings.debug:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    'error': 'INTERNAL_ERROR',
                    'message': str(exc),
                    'type': type(exc).__name__,
                },
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                'error': 'INTERNAL_ERROR',
                'message': 'An internal error occurred',
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes."""

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Check application health."""
        from .infrastructure.database import health_check as db_health
        from .infrastructure.messaging import health_check as redis_health

        services = {}
        if settings.sync.store_backend == 'sql':
            services['database'] = 'up' if await db_health() else 'down'
        if settings.sync.notifier_backend == 'redis':
            services['redis'] = 'up' if await redis_health() else 'down'

        worker = getattr(app.state, 'reconciliation_worker', None)
        return {
            'status': 'healthy' if all(s == 'up' for s in services.values()) else 'unhealthy',
            'services': services,
            'reconciliation_worker': worker.get_stats() if worker else None,
            'version': settings.app_version,
            'environment': settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            'name': settings.app_name,
            'version': settings.app_version,
            'api_docs': '/docs' if settings.debug else None,
        }

    from .api.v1 import api_router

    app.include_router(api_router)


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "equipment_sync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
