from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from flexi_scheduler.api.errors import register_error_handlers
from flexi_scheduler.api.routes import availability, integrity, orders, scheduler
from flexi_scheduler.core.config import settings
from flexi_scheduler.core.container import ServiceContainer
from flexi_scheduler.core.observability import get_logger, setup_logging

logger = get_logger(__name__)

api_router = APIRouter()
api_router.include_router(scheduler.router)
api_router.include_router(integrity.router)
api_router.include_router(orders.router)
api_router.include_router(availability.router)


def create_app(
    container: ServiceContainer | None = None, start_monitor: bool = True
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Pre-wired services; built from settings when omitted
        start_monitor: Run the integrity check on startup and periodically
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging()
        logger.info(
            "Application started",
            project_name=settings.PROJECT_NAME,
            environment=settings.ENVIRONMENT,
            persistence_backend=settings.PERSISTENCE_BACKEND,
        )
        monitor = app.state.container.integrity_monitor
        if start_monitor:
            monitor.start()
        try:
            yield
        finally:
            await monitor.stop()
            logger.info("Shutting down application")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container or ServiceContainer()
    register_error_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app
