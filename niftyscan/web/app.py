"""
FastAPI application factory.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from niftyscan import __version__
from niftyscan.core.config import ConfigManager, NiftyScanConfig
from niftyscan.core.exceptions import (
    ConfigurationError,
    NiftyScanError,
    ReportTimeoutError,
    RunInProgressError,
)
from niftyscan.core.logging import logger
from niftyscan.core.services import DailyReportService, build_service

from .models import ErrorResponse
from .routes import health_router, report_router

_STATUS_BY_ERROR: list[tuple[type[NiftyScanError], int]] = [
    (RunInProgressError, 409),
    (ReportTimeoutError, 504),
    (ConfigurationError, 500),
]


def create_app(
    config: NiftyScanConfig | None = None,
    report_service: DailyReportService | None = None,
) -> FastAPI:
    """Create the FastAPI app; collaborators not supplied are built from configuration at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if getattr(app.state, "config", None) is None:
            app.state.config = ConfigManager().get_config()
        if getattr(app.state, "report_service", None) is None:
            app.state.report_service = build_service(app.state.config)
        logger.info(
            f"Schedule: {app.state.config.scheduler.cron_time} ({app.state.config.scheduler.timezone})"
        )
        yield

    app = FastAPI(
        title="niftyscan",
        description="Daily stock screening report gated on the NIFTY 50 trend",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.report_service = report_service

    _setup_middleware(app)
    app.include_router(health_router)
    app.include_router(report_router)
    _setup_exception_handlers(app)
    return app


class HTTPRequestLogger(BaseHTTPMiddleware):
    """Logs every request with its status and duration."""

    def __init__(self, app, exclude_paths=None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/docs", "/openapi.json"]

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if any(path.startswith(exclude) for exclude in self.exclude_paths):
            return await call_next(request)

        start_time = time.time()
        logger.debug(f"{request.method} {path}")
        response = await call_next(request)
        duration = (time.time() - start_time) * 1000
        logger.bind(method=request.method, path=path, status_code=response.status_code).info(
            f"{request.method} {path} -> {response.status_code} in {duration:.2f}ms"
        )
        return response


def _setup_middleware(app: FastAPI) -> None:
    app.add_middleware(HTTPRequestLogger)


def _setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NiftyScanError)
    async def niftyscan_error_handler(request: Request, exc: NiftyScanError) -> JSONResponse:
        status_code = 500
        for error_type, code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                status_code = code
                break
        logger.bind(error_code=exc.error_code).error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=exc.message, code=exc.error_code).model_dump(),
        )
