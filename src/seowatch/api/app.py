"""FastAPI application exposing the monitoring service."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..cdn.types import CDNError
from ..config import AppSettings, get_settings
from ..monitoring.types import MonitoringError
from ..scheduler.types import (
    RunAlreadyInProgressError,
    ScheduleNotFoundError,
    SchedulerError,
)
from ..service import MonitoringService
from ..utils.logging import get_structured_logger, setup_logging
from .auth import setup_auth
from .middleware import setup_middleware
from .routers import cdn_router, monitoring_router, scheduler_router
from .types import APIError, HealthCheckResponse, HealthStatus

logger = get_structured_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Start the monitoring service with the app and stop it on shutdown."""
    logger.info("Starting seowatch API application")

    if getattr(app.state, "service", None) is None:
        app.state.service = MonitoringService(app.state.settings)

    try:
        await app.state.service.start()
        logger.info("seowatch API application started")

        yield

    except Exception as e:
        logger.error(f"Failed to start application: {str(e)}")
        raise
    finally:
        logger.info("Shutting down seowatch API application")
        try:
            await app.state.service.stop()
        except Exception as e:
            logger.error(f"Error during application shutdown: {str(e)}")


def create_app(
    settings: Optional[AppSettings] = None,
    service: Optional[MonitoringService] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="seowatch API",
        description="SEO crawl scheduling, alerting and CDN invalidation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_middleware(app, settings)
    setup_auth(app, settings)
    setup_exception_handlers(app)
    setup_routers(app)

    logger.info("FastAPI application created and configured")
    return app


# Starlette resolves handlers along the exception's MRO, so subclasses
# listed here win over their bases.
DOMAIN_ERROR_STATUS: dict[type[Exception], int] = {
    ScheduleNotFoundError: status.HTTP_404_NOT_FOUND,
    RunAlreadyInProgressError: status.HTTP_409_CONFLICT,
    SchedulerError: 422,
    MonitoringError: 422,
    CDNError: 422,
    APIError: status.HTTP_400_BAD_REQUEST,
}


def _status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in DOMAIN_ERROR_STATUS:
            return DOMAIN_ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": <detail>}``."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        # HTTPBearer answers 403 when the header is missing.
        status_code = exc.status_code
        if exc.status_code == 403 and exc.detail == "Not authenticated":
            status_code = 401

        logger.warning(
            "HTTP exception",
            status_code=status_code,
            detail=exc.detail,
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = _status_for(exc)
        logger.warning(
            "Request rejected",
            error=str(exc),
            error_type=type(exc).__name__,
            status_code=status_code,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    for error_class in DOMAIN_ERROR_STATUS:
        app.add_exception_handler(error_class, domain_error_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An unexpected error occurred"},
        )


def setup_routers(app: FastAPI) -> None:
    """Setup API routers."""

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check(request: Request) -> HealthCheckResponse:
        service = getattr(request.app.state, "service", None)
        running = bool(service and service.is_running)
        return HealthCheckResponse(
            status=HealthStatus.HEALTHY if running else HealthStatus.DEGRADED,
            timestamp=datetime.now(),
            version=__version__,
            service_running=running,
        )

    api_prefix = "/api"

    app.include_router(
        scheduler_router, prefix=f"{api_prefix}/scheduler", tags=["Scheduler"]
    )
    app.include_router(
        monitoring_router, prefix=f"{api_prefix}/monitoring", tags=["Monitoring"]
    )
    app.include_router(cdn_router, prefix=f"{api_prefix}/cdn", tags=["CDN"])


def main() -> None:
    """Run the API server with the monitoring service."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.json_logs)

    logger.info(
        "Starting seowatch API server",
        host=settings.api_host,
        port=settings.api_port,
    )

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
