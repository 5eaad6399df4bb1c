"""
FastAPI application for the Resource Booking service.

This is the main entry point for the HTTP API, providing:
- Resource administration endpoints
- Booking, availability and utilization endpoints
- Appointment endpoints
- Health endpoint
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from resource_booking import __version__
from resource_booking.api.appointment_routes import router as appointment_router
from resource_booking.api.dependencies import init_service
from resource_booking.api.middleware import RequestLoggingMiddleware, get_request_id
from resource_booking.api.models import HealthResponse
from resource_booking.api.resource_routes import router as resource_router
from resource_booking.config import configure_logging, get_settings
from resource_booking.exceptions import (
    AppointmentNotFoundError,
    BookingConflictError,
    BookingError,
    BookingNotFoundError,
    BookingValidationError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting Resource Booking API")
    init_service()
    logger.info("Resource Booking API started")

    yield

    logger.info("Shutting down Resource Booking API")


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="Resource Booking API",
    description="""
# Resource Booking API

Book shared resources (rooms, equipment, vehicles) for time intervals.

## Availability Rules
- Intervals are half-open: a booking ending at 10:00 does not block one starting at 10:00
- Cancelled bookings never block
- Resources under maintenance reject every booking

## Error Handling
- **400** - Invalid payload or timestamp
- **404** - Resource or booking not found
- **409** - Requested interval is unavailable
- **500** - Server error
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(resource_router)
app.include_router(appointment_router)


# =============================================================================
# Exception Handlers
# =============================================================================


def _error_content(error_type: str, message, details=None, retryable: bool = False) -> dict:
    return {
        "error_type": error_type,
        "message": message,
        "details": details,
        "retryable": retryable,
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request schema failures as 400 with field details."""
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=_error_content("validation_error", "Validation failed", details),
    )


@app.exception_handler(BookingError)
async def booking_exception_handler(request: Request, exc: BookingError):
    """Map booking errors to status codes."""
    if isinstance(exc, BookingValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_content("validation_error", exc.message),
        )

    if isinstance(exc, (ResourceNotFoundError, BookingNotFoundError, AppointmentNotFoundError)):
        return JSONResponse(
            status_code=404,
            content=_error_content("not_found", exc.message),
        )

    if isinstance(exc, BookingConflictError):
        return JSONResponse(
            status_code=409,
            content=_error_content(
                "conflict",
                exc.message,
                {"conflictingBookingIds": exc.conflicting_ids},
                retryable=exc.retryable,
            ),
        )

    logger.error(f"[{get_request_id()}] Unhandled booking error: {exc.message}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_content("internal_error", "An unexpected error occurred", retryable=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    error_type = "not_found" if exc.status_code == 404 else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(error_type, exc.detail, retryable=exc.status_code >= 500),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"[{get_request_id()}] Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_content("internal_error", "An unexpected error occurred", retryable=True),
    )


# =============================================================================
# Health Endpoint
# =============================================================================


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    tags=["System"],
)
async def health_check() -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        storage_backend=get_settings().storage_backend,
    )


# =============================================================================
# Run with Uvicorn
# =============================================================================


def run_server(host: str | None = None, port: int | None = None, reload: bool | None = None):
    """Run the API server with Uvicorn (defaults from settings)."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "resource_booking.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=settings.api_reload if reload is None else reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run_server()
