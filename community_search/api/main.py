"""
FastAPI main application for Community Search.
"""

import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routes import router, init_search_engine, shutdown_search_engine, ERROR_CODES
from community_search.search.errors import SearchError
from community_search.config.search_config import (
    LOG_CONFIG,
    API_CONFIG,
    CORS_CONFIG,
    DATABASE_PATH,
    ENVIRONMENT,
    DEBUG
)

# Configure logging
logging.config.dictConfig(LOG_CONFIG)
logger = logging.getLogger('api')


# ============================================================================
# Application Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Community Search API...")
    logger.info(f"Environment: {ENVIRONMENT}")
    logger.info(f"Debug mode: {DEBUG}")

    try:
        init_search_engine(db_path=DATABASE_PATH)
        logger.info(f"Search engine ready (store: {DATABASE_PATH})")

    except Exception as e:
        logger.error(f"Failed to initialize search engine: {e}")
        raise

    logger.info("API startup complete")

    yield

    # Shutdown
    logger.info("Shutting down Community Search API...")
    shutdown_search_engine()
    logger.info("Shutdown complete")


# ============================================================================
# Application Setup
# ============================================================================

app = FastAPI(
    title="Community Search API",
    description="Search across articles, questions, forum posts and feature requests",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if DEBUG else None,
    redoc_url="/redoc" if DEBUG else None
)

# ============================================================================
# CORS Configuration
# ============================================================================

# Browser clients call from any origin without credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_CONFIG['allow_origins'],
    allow_credentials=CORS_CONFIG['allow_credentials'],
    allow_methods=CORS_CONFIG['allow_methods'],
    allow_headers=CORS_CONFIG['allow_headers'],
    max_age=CORS_CONFIG['max_age'],
)

# ============================================================================
# Include Routers
# ============================================================================

app.include_router(router)


# ============================================================================
# Root Endpoint
# ============================================================================

@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": "Community Search API",
        "version": "1.0.0",
        "description": "Multi-source search for community content",
        "endpoints": {
            "enhanced_search": "/api/v1/enhanced-search",
            "universal_search": "/api/v1/universal-search",
            "autocomplete": "/api/v1/search-autocomplete",
            "health": "/api/v1/health"
        },
        "documentation": "/docs" if DEBUG else None
    }


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request, exc):
    """Malformed request bodies are client errors in the endpoint's code family."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get('loc', ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get('msg'))
    else:
        message = "Invalid request"

    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": ERROR_CODES.get(request.url.path, "INVALID_REQUEST"),
                "message": message
            }
        }
    )


@app.exception_handler(SearchError)
async def search_error_handler(request, exc):
    """Search errors raised outside a route body (e.g. dependencies)."""
    logger.warning(f"Search error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(ERROR_CODES.get(request.url.path))
    )


@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Handle 404 errors."""
    return JSONResponse(
        status_code=404,
        content={
            "error": {
                "code": "NOT_FOUND",
                "message": f"Resource not found: {request.url.path}"
            }
        }
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Handle 500 errors."""
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ERROR_CODES.get(request.url.path, "INTERNAL_ERROR"),
                "message": str(exc) if DEBUG else "An unexpected error occurred"
            }
        }
    )


# ============================================================================
# Development Server
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "community_search.api.main:app",
        host=API_CONFIG['host'],
        port=API_CONFIG['port'],
        reload=DEBUG,
        log_level=API_CONFIG['log_level']
    )
