"""Quality Compliance Portal - Main FastAPI Application

B2B steel certificate review and support ticket workflow.

This module creates and configures the main FastAPI application, including:
- API routers (documents, tickets, audit)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping workflow errors to HTTP responses
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from database import init_db
from domain.errors import (
    ForbiddenError,
    InfrastructureError,
    InvalidTransitionError,
    MaintenanceModeError,
    NotFoundError,
    ValidationError,
    WorkflowError,
)
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router
from api.v1.documents.router import router as documents_router
from api.v1.tickets.router import router as tickets_router
from audit.router import router as audit_router

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: create missing tables
    - Shutdown: log only
    """
    logger.info("Quality Compliance API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Maintenance mode: {settings.MAINTENANCE_MODE}")
    init_db()

    yield

    logger.info("Quality Compliance API shutting down...")


app = FastAPI(
    title="Quality Compliance API",
    description="Steel certificate review, quality adjudication and support tickets",
    version="0.1.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Request ID Middleware (must be first for proper correlation)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

# Most specific first: MaintenanceModeError is a ForbiddenError
_WORKFLOW_STATUS = (
    (MaintenanceModeError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


def status_for(exc: WorkflowError) -> int:
    """HTTP status code for a business error."""
    for error_type, status_code in _WORKFLOW_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(InfrastructureError)
async def infrastructure_exception_handler(
    request: Request,
    exc: InfrastructureError
) -> JSONResponse:
    """Handle collaborator failures.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.error(
        f"Infrastructure error on {request.method} {request.url.path}: {exc.message}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": exc.code,
            "message": InfrastructureError.public_message,
        },
    )


@app.exception_handler(WorkflowError)
async def workflow_exception_handler(
    request: Request,
    exc: WorkflowError
) -> JSONResponse:
    """Handle business errors; their message is safe to show to users."""
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns a structured error response with field-level details.
    """
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": exc.errors()}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors that escaped the repositories."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions.

    Full details are logged but not exposed to the client.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Field errors without the raw input and exception objects."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics, ready)
app.include_router(observability_router)

app.include_router(documents_router, prefix="/api/v1")
app.include_router(tickets_router, prefix="/api/v1")
app.include_router(audit_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "Quality Compliance API",
        "version": "0.1.0",
        "status": "running",
        "docs": None if settings.is_production else "/docs",
    }


@app.get("/api/v1", include_in_schema=False)
async def api_root() -> dict[str, Any]:
    """API v1 root endpoint."""
    return {
        "version": "v1",
        "status": "active",
        "endpoints": {
            "documents": "/api/v1/documents",
            "tickets": "/api/v1/tickets",
            "audit": "/api/v1/audit",
        }
    }


def create_app() -> FastAPI:
    """Application factory for creating test instances.

    Returns the configured FastAPI application instance.
    """
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
