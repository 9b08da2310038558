"""
FastAPI route handlers for search API.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header
from fastapi.responses import JSONResponse

from .models import (
    SearchRequest,
    EnhancedSearchResponse,
    UniversalSearchResponse,
    AutocompleteRequest,
    AutocompleteResponse,
    HealthResponse,
    ErrorResponse
)
from community_search.config.search_config import DATABASE_PATH
from community_search.identity.client import IdentityClient
from community_search.search.errors import ConfigurationError, SearchError
from community_search.search.search_engine import SearchEngine
from community_search.store.base import ContentStore
from community_search.store.sqlite_store import SqliteContentStore

logger = logging.getLogger('api')

# Global search engine instance (created on startup)
search_engine: SearchEngine = None

ENHANCED_SEARCH_FAILED = "ENHANCED_SEARCH_FAILED"
SEARCH_FAILED = "SEARCH_FAILED"
AUTOCOMPLETE_FAILED = "AUTOCOMPLETE_FAILED"

# Error code family per endpoint, also used for request validation errors
ERROR_CODES = {
    "/api/v1/enhanced-search": ENHANCED_SEARCH_FAILED,
    "/api/v1/universal-search": SEARCH_FAILED,
    "/api/v1/search-autocomplete": AUTOCOMPLETE_FAILED,
}


def error_response(exc: SearchError, code: str) -> JSONResponse:
    """Error envelope using the endpoint's code family."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(code)
    )


# ============================================================================
# Dependency Injection
# ============================================================================

def get_search_engine() -> SearchEngine:
    """Get the global search engine instance."""
    if search_engine is None:
        raise ConfigurationError("Search engine not initialized")
    return search_engine


# ============================================================================
# API Router
# ============================================================================

router = APIRouter(prefix="/api/v1", tags=["search"])


# ============================================================================
# Search Endpoints
# ============================================================================

@router.post(
    "/enhanced-search",
    response_model=EnhancedSearchResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}
)
async def enhanced_search(
    request: SearchRequest,
    background_tasks: BackgroundTasks,
    authorization: Optional[str] = Header(None),
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Search articles, questions, forum posts and feature requests.

    Extracts key terms, searches every requested content type concurrently,
    ranks and merges the results, and attaches suggestions and related
    articles. Authenticated searches are recorded after the response.
    """
    try:
        query = engine.build_query(
            text=request.query,
            content_types=request.content_types,
            category_id=request.category_id,
            limit=request.limit,
            offset=request.offset,
            include_related=request.include_related,
            include_suggestions=request.include_suggestions
        )
        outcome = await engine.search(query, authorization)

    except SearchError as e:
        logger.warning(f"Enhanced search rejected: {e.message}")
        return error_response(e, ENHANCED_SEARCH_FAILED)

    except Exception as e:
        logger.error(f"Enhanced search failed: {e}", exc_info=True)
        return error_response(SearchError(str(e)), ENHANCED_SEARCH_FAILED)

    if outcome.event is not None:
        background_tasks.add_task(engine.analytics.record, outcome.event)

    return {"data": outcome.payload}


@router.post(
    "/universal-search",
    response_model=UniversalSearchResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}
)
async def universal_search(
    request: SearchRequest,
    background_tasks: BackgroundTasks,
    authorization: Optional[str] = Header(None),
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Plain cross-type search without suggestions or related articles.
    """
    try:
        query = engine.build_query(
            text=request.query,
            content_types=request.content_types,
            category_id=request.category_id,
            limit=request.limit,
            offset=request.offset,
            include_related=False,
            include_suggestions=False
        )
        outcome = await engine.search(query, authorization)

    except SearchError as e:
        logger.warning(f"Universal search rejected: {e.message}")
        return error_response(e, SEARCH_FAILED)

    except Exception as e:
        logger.error(f"Universal search failed: {e}", exc_info=True)
        return error_response(SearchError(str(e)), SEARCH_FAILED)

    if outcome.event is not None:
        background_tasks.add_task(engine.analytics.record, outcome.event)

    payload = outcome.payload
    return {
        "data": {
            "results": payload['results'],
            "total": payload['total'],
            "query": payload['query'],
            "contentTypes": payload['contentTypes'],
        }
    }


# ============================================================================
# Autocomplete Endpoint
# ============================================================================

@router.post(
    "/search-autocomplete",
    response_model=AutocompleteResponse,
    responses={400: {"model": ErrorResponse}}
)
async def search_autocomplete(
    request: AutocompleteRequest,
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Autocomplete suggestions for a partial query.

    Queries shorter than two characters return an empty list.
    """
    try:
        data = await engine.autocomplete(request.query, request.limit)

    except SearchError as e:
        logger.warning(f"Autocomplete rejected: {e.message}")
        return error_response(e, AUTOCOMPLETE_FAILED)

    except Exception as e:
        logger.error(f"Autocomplete failed: {e}", exc_info=True)
        return error_response(SearchError(str(e)), AUTOCOMPLETE_FAILED)

    return {"data": data}


# ============================================================================
# Health Check Endpoint
# ============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Health check endpoint.

    Returns service status and basic metrics.
    """
    try:
        return await engine.health()

    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "error": str(e)
            }
        )


# ============================================================================
# Initialization
# ============================================================================

def init_search_engine(
    db_path: str = None,
    store: ContentStore = None,
    identity: IdentityClient = None
):
    """
    Initialize the global search engine instance.

    This should be called during application startup.
    """
    global search_engine

    logger.info("Initializing search engine...")

    try:
        store = store or SqliteContentStore(db_path or DATABASE_PATH)
        identity = identity or IdentityClient()
        search_engine = SearchEngine(store=store, identity=identity)

        if not identity.enabled:
            logger.warning("AUTH_URL not set: all searches are treated as anonymous")

        logger.info("Search engine initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize search engine: {e}")
        raise

    return search_engine


def shutdown_search_engine():
    """
    Cleanup search engine on shutdown.

    This should be called during application shutdown.
    """
    global search_engine

    if search_engine:
        logger.info("Shutting down search engine...")
        search_engine.close()
        search_engine = None
