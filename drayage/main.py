"""
FastAPI application entry point for the drayage lifecycle engine.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from drayage.core.config import settings
from drayage.core.exceptions import (
    ConfigurationError,
    ConflictError,
    DrayageError,
    InsufficientResourceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from drayage.api.v1 import api_router
from drayage.services.confirmation import AsyncioConfirmationScheduler
from drayage.services.lifecycle import build_coordinator

logger = logging.getLogger(__name__)

# Checked in order; first match wins
ERROR_STATUS = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (InsufficientResourceError, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(error: DrayageError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Wires the lifecycle coordinator on startup and cancels pending
    in-process confirmation follow-ups on shutdown.
    """
    # Startup
    # Note: In production, use Alembic migrations instead of init_db
    if getattr(app.state, "coordinator", None) is None:
        app.state.coordinator = build_coordinator(settings)
    yield
    # Shutdown
    confirmations = app.state.coordinator.confirmations
    if isinstance(confirmations, AsyncioConfirmationScheduler):
        await confirmations.shutdown()


def create_application() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Drayage Lifecycle Engine

        Order lifecycle, storage charges and terminal appointments for
        import/export container moves:

        - **Order State Machine**: only legal status transitions reach billing and dispatch
        - **Tiered Charges**: per-diem and demurrage by container size, exact to the cent
        - **Terminal Appointments**: lead time, gate hours, slot capacity and reschedule chains
        """,
        version=settings.app_version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DrayageError)
    async def drayage_error_handler(request: Request, exc: DrayageError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


# Create application instance
app = create_application()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": f"{settings.api_v1_prefix}/docs",
        "openapi": f"{settings.api_v1_prefix}/openapi.json",
    }
