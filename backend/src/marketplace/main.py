import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.api.v1 import bids, items
from marketplace.core.config import Settings, settings
from marketplace.core.database import async_session_maker, engine
from marketplace.core.exceptions import MarketplaceError
from marketplace.core.logging import configure_logging
from marketplace.middleware.metrics import PrometheusMiddleware, metrics_endpoint
from marketplace.services.notification_gateway import NotificationGateway
from marketplace.services.notification_service import NotificationService
from marketplace.services.templates import TemplateStore

logger = logging.getLogger(__name__)


def build_notification_service(app_settings: Settings) -> NotificationService:
    """Wire gateway, templates and contact lookup from settings."""
    if app_settings.NOTIFICATION_TEMPLATES_FILE:
        templates = TemplateStore.from_file(app_settings.NOTIFICATION_TEMPLATES_FILE)
    else:
        templates = TemplateStore.default()
    return NotificationService(
        gateway=NotificationGateway(app_settings),
        templates=templates,
        session_maker=async_session_maker,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    configure_logging(settings)
    logger.info("Starting application...")
    if getattr(app.state, "notifications", None) is None:
        app.state.notifications = build_notification_service(settings)

    yield

    # Shutdown
    notifications: NotificationService = app.state.notifications
    if notifications.pending:
        logger.info(f"Waiting for {notifications.pending} notification tasks")
    await notifications.drain()
    await notifications.gateway.aclose()
    await engine.dispose()
    logger.info("Application stopped")


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Domain errors the routers do not translate (persistence failures)."""
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Bids",
        version="1.0.0",
        description="Buyer bids on seller stock with SMS/email notifications",
        lifespan=lifespan,
    )

    # Prometheus Metrics Middleware (must be first to capture all requests)
    app.add_middleware(PrometheusMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(bids.router, tags=["bids"])
    app.include_router(items.router, prefix="/items", tags=["items"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Prometheus metrics endpoint
    app.add_route("/metrics", metrics_endpoint)

    return app


app = create_app()
