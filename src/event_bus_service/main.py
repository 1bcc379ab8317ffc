"""
Event Bus Service - Main FastAPI Application

Receives domain events from producers, stores them, fans each one out to
every downstream service through the `events(input: EventInput!)` GraphQL
mutation and forwards a copy to the logging service.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.database import init_db
from .core.errors import AuthenticationError, EventBusError, ValidationError
from .services import EventBus
from .api import router

# Configure logging with timestamps
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup (tables, HTTP client, registry) and shutdown (cleanup).
    """
    # Startup
    if settings.AUTO_CREATE_TABLES:
        await init_db()

    bus = EventBus.from_settings(settings)
    app.state.event_bus = bus
    logger.info(
        f"Event bus ready on port {settings.SERVICE_PORT}; "
        f"destinations: {', '.join(bus.registry.names) or 'none'} "
        f"({bus.dispatcher.mode} dispatch)"
    )
    if not settings.JWT_SECRET:
        logger.warning("JWT_SECRET is not set; every event request will be rejected")

    yield

    # Shutdown
    logger.info("Shutting down event bus")
    await bus.aclose()
    app.state.event_bus = None


# Create FastAPI application
# Disable docs in production for security
app = FastAPI(
    title="Event Bus Service",
    description="Event store and fanout hub for the food-ordering platform services",
    version=settings.SERVICE_VERSION,
    docs_url="/docs" if not settings.IS_PROD else None,
    redoc_url="/redoc" if not settings.IS_PROD else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(router)


@app.get("/", tags=["Info"])
async def root():
    """Root endpoint."""
    response = {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "operational"
    }
    # Only include docs URL in non-production environments
    if not settings.IS_PROD:
        response["docs"] = "/docs"
    return response


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(EventBusError)
async def event_bus_exception_handler(request: Request, exc: EventBusError) -> JSONResponse:
    """Map terminal event bus errors to HTTP responses."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    if exc.status_code >= 500:
        logger.error(f"{exc.category} on {request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"{exc.category} on {request.method} {request.url.path}: {exc}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.category, "detail": str(exc)},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed requests in the same shape as other event bus errors."""
    fields = set()
    in_body = False
    for err in exc.errors():
        # loc is ("body" | "query" | "path", field, ...)
        loc = err.get("loc", ())
        in_body = in_body or (bool(loc) and loc[0] == "body")
        fields.add(".".join(str(part) for part in loc[1:]) or "body")
    fields = sorted(fields)

    category = ValidationError.category if in_body else "Invalid request"
    logger.info(f"{category} on {request.method} {request.url.path}: {fields}")

    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": category, "detail": f"Invalid field(s): {', '.join(fields)}"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT)
