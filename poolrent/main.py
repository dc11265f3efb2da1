"""
FastAPI Application Entry Point.

This module initializes the FastAPI application with:
- MongoDB connection via Motor
- CORS middleware
- Custom middleware (logging, request timeout)
- Exception handlers
- Lifespan events (startup/shutdown)
- API routers
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from poolrent.api.router import api_router
from poolrent.config import settings
from poolrent.core.exceptions import APIException, ValidationException
from poolrent.core.middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from poolrent.db.mongodb import mongodb

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events (Startup/Shutdown)
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for startup and shutdown events.

    Startup:
        - Warn about missing secrets (the gates fail closed without them)
        - Connect to MongoDB
        - Create indexes

    Shutdown:
        - Close MongoDB connection
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if not settings.JWT_SECRET:
        logger.warning("JWT_SECRET is not set; authenticated routes will answer 500")
    if not settings.ADMIN_SECRET:
        logger.warning("ADMIN_SECRET is not set; admin routes will answer 500")

    await mongodb.connect()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await mongodb.close()


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url=settings.DOCS_URL if settings.DEBUG else None,
    redoc_url=settings.REDOC_URL if settings.DEBUG else None,
    openapi_url=settings.OPENAPI_URL if settings.DEBUG else None,
    lifespan=lifespan,
)


# =============================================================================
# Middleware
# =============================================================================

# GZip Compression
app.add_middleware(GZipMiddleware, minimum_size=1000)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.cors_methods_list,
    allow_headers=["*"] if settings.CORS_ALLOW_HEADERS == "*" else settings.CORS_ALLOW_HEADERS.split(","),
)

# Custom Request Logging Middleware
app.add_middleware(RequestLoggingMiddleware)

# Per-request time budget
app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)


# =============================================================================
# Exception Handlers
# =============================================================================
def error_content(exc: APIException) -> dict:
    content = {"message": exc.message, "code": exc.error_code}
    if exc.details is not None:
        content["details"] = exc.details
    return content


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handle custom API exceptions."""
    return JSONResponse(status_code=exc.status_code, content=error_content(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors as 400 Invalid data."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    wrapped = ValidationException(details=errors)
    return JSONResponse(status_code=wrapped.status_code, content=error_content(wrapped))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    message = str(exc) if settings.DEBUG else "An unexpected error occurred"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": message, "code": "INTERNAL_ERROR"}
    )


# =============================================================================
# Include API Routers
# =============================================================================
app.include_router(api_router, prefix=settings.API_PREFIX)


# =============================================================================
# Root Endpoints
# =============================================================================
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": "MongoDB",
        "docs": settings.DOCS_URL,
        "health": f"{settings.API_PREFIX}/health"
    }


# =============================================================================
# Development Server
# =============================================================================
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "poolrent.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD
    )
