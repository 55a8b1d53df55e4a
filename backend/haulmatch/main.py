"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Exception handlers for API errors
- API v1 router mounting (matching trigger endpoints)
- Optional periodic matching workers started in the lifespan
- Health check endpoint
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from haulmatch.api.v1.router import router as v1_router
from haulmatch.core.config import settings
from haulmatch.core.database import async_session_factory
from haulmatch.core.errors import APIError
from haulmatch.core.responses import ErrorDetail, ErrorResponse
from haulmatch.services.matching_runs import run_backfill, run_recompute
from haulmatch.services.periodic_worker import PeriodicWorker

logger = structlog.get_logger()


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Return the error envelope for an APIError."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert FastAPI's validation errors to the standard envelope.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from Pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code and field-level details.
    """
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ],
            )
        ).model_dump(),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Returns 500 INTERNAL_ERROR without exposing stack traces; the exception
    is logged server-side.
    """
    logger.exception("unhandled_exception", exc_info=exc, path=str(request.url.path))

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )


def build_workers() -> list[PeriodicWorker]:
    """Periodic workers enabled by settings."""
    workers: list[PeriodicWorker] = []
    if settings.recompute_worker_enabled:
        workers.append(
            PeriodicWorker(
                "recompute",
                async_session_factory,
                run_recompute,
                interval_seconds=settings.recompute_interval_seconds,
            )
        )
    if settings.backfill_worker_enabled:
        workers.append(
            PeriodicWorker(
                "backfill",
                async_session_factory,
                run_backfill,
                interval_seconds=settings.backfill_interval_seconds,
            )
        )
    return workers


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Start enabled workers on startup and stop them on shutdown."""
    workers = build_workers()
    for worker in workers:
        worker.start()
    logger.info("startup_complete", workers=len(workers), environment=settings.environment)
    try:
        yield
    finally:
        for worker in workers:
            await worker.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="HaulMatch Matching Service",
        version="1.0.0",
        description="Driver/job match scoring pipeline",
        lifespan=lifespan,
    )

    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    # Health check endpoint (outside versioned API)
    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Used by uvicorn: uvicorn haulmatch.main:app
app = create_app()
