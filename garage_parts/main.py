"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from garage_parts.api.routes import router
from garage_parts.api.websocket import handle_notification_stream
from garage_parts.config import get_settings
from garage_parts.errors import (
    InvalidRuleError,
    InvalidTransitionError,
    NotFoundError,
    OutstandingOrderError,
    PartsServiceError,
    PolicyViolationError,
    SupplierUnavailableError,
)
from garage_parts.services.desk import PartsDesk
from garage_parts.utils.logging import get_logger, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)

# Most specific first; the first matching class wins
ERROR_STATUS_CODES: list[tuple[type[PartsServiceError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (OutstandingOrderError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (PolicyViolationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidRuleError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (SupplierUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("application_starting")
    desk: PartsDesk = app.state.desk
    await desk.startup()

    yield

    # Shutdown
    logger.info("application_shutting_down")
    await desk.shutdown()


async def handle_service_error(request: Request, exc: PartsServiceError) -> JSONResponse:
    """Map service errors to HTTP responses."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break

    logger.warning(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "error": "ValueError"},
    )


def create_app(desk: PartsDesk | None = None) -> FastAPI:
    """
    Build the application around a parts desk.

    Args:
        desk: Pre-built desk; a new one is built from settings if omitted
    """
    app = FastAPI(
        title="Garage Parts Service",
        description="Parts inventory, supplier pricing and automated reordering "
        "for a vehicle service shop",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.desk = desk or PartsDesk()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PartsServiceError, handle_service_error)
    app.add_exception_handler(ValueError, handle_value_error)

    @app.get("/health")
    async def health_check() -> dict[str, str | bool]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "garage-parts",
            "monitoring": app.state.desk.reordering.is_monitoring,
        }

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Garage Parts Service API",
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(router, prefix="/api/v1", tags=["api"])

    # WebSocket endpoint
    @app.websocket("/ws/notifications")
    async def notifications_websocket(websocket: WebSocket) -> None:
        """WebSocket endpoint for live notifications."""
        await handle_notification_stream(websocket, app.state.desk.notifications)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "garage_parts.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
