"""FastAPI application factory and configuration."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from promread import __version__
from promread.api.middleware import LoggingMiddleware, RequestIDMiddleware
from promread.api.routers import health_router, read_router
from promread.config import get_settings
from promread.exceptions import PromReadError, get_http_status
from promread.logging_config import setup_logging
from promread.service import RemoteReadService

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Startup: Configure logging and build the remote read service from
      settings unless one was injected
    - Shutdown: Close the ClickHouse client

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "application_starting",
        host=settings.promread_host,
        port=settings.promread_port,
        version=__version__,
    )

    try:
        if getattr(app.state, "read_service", None) is None:
            app.state.read_service = RemoteReadService.from_settings(settings)
            logger.info(
                "read_service_initialized",
                clickhouse_url=settings.clickhouse_url,
                query_limit=settings.query_limit,
                series_limit=settings.series_limit,
                tag_catalog=str(settings.tag_catalog_path),
            )
        logger.info("application_initialized")
    except Exception as e:
        logger.error("initialization_failed", error=str(e), exc_info=True)
        raise

    yield

    logger.info("application_shutting_down")
    try:
        if getattr(app.state, "read_service", None) is not None:
            app.state.read_service.close()
            logger.info("read_service_closed")

        logger.info("cleanup_completed")
    except Exception as e:
        logger.error("shutdown_error", error=str(e), exc_info=True)


def create_app(read_service: RemoteReadService | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        read_service: Prebuilt service; built from settings at startup when omitted

    Returns:
        Configured FastAPI application instance
    """

    app = FastAPI(
        title="promread API",
        description="Prometheus remote read for ClickHouse",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.read_service = read_service

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(read_router)

    logger.info("application_created", title=app.title, version=app.version)
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(PromReadError)
    async def promread_exception_handler(
        request: Request,
        exc: PromReadError,
    ) -> JSONResponse:
        """Handle PromReadError and all subclasses."""
        request_id = getattr(request.state, "request_id", "unknown")
        status_code = get_http_status(exc)
        logger.warning(
            "api_exception",
            path=request.url.path,
            status_code=status_code,
            error_type=type(exc).__name__,
            detail=exc.message,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=status_code,
            content={
                "detail": exc.message,
                "error_type": type(exc).__name__,
                "request_id": request_id,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unexpected_error",
            path=request.url.path,
            error=str(exc),
            request_id=request_id,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )


app = create_app()
