"""FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Header, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.clients.search_api_client import SearchAPIClient
from app.config import get_settings
from app.logging_config import clear_request_id, get_logger, set_request_id, setup_logging
from app.models.error import ErrorResponse
from app.models.search import (
    IndexStats,
    QueryHistoryItem,
    SearchResponse,
    SearchScope,
    SearchSuggestion,
)
from app.services.search_service import DEFAULT_SESSION, SearchCancelledError, SearchService
from app.storage.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from app.storage.record_store import JsonFileRecordStore

# Setup logging configuration
setup_logging()
logger = get_logger(__name__)

# Load and validate configuration at startup
settings = get_settings()

# Global service instance
search_service: SearchService | None = None


def create_search_service() -> SearchService:
    """Build the search service from settings."""
    api_client = None
    if settings.search_api_base_url:
        api_client = SearchAPIClient(
            base_url=settings.search_api_base_url,
            timeout=settings.api_timeout,
            probe_timeout=settings.probe_timeout,
        )

    return SearchService(
        structured_store=JsonFileRecordStore(settings.structured_store_path, name="structured"),
        flat_store=JsonFileRecordStore(settings.flat_store_path, name="flat"),
        local_store=JsonFileKeyValueStore(settings.local_state_path),
        # Provider choice lasts for the life of the process
        session_store=InMemoryKeyValueStore(),
        api_client=api_client,
        settings=settings,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    global search_service

    logger.info("Starting GST Case Search...")
    logger.info(
        f"Configuration: api={settings.search_api_base_url or 'not configured'}, "
        f"cache_ttl={settings.cache_ttl}s, data_dir={settings.data_dir}"
    )

    # Initialize search service and resolve the provider
    search_service = create_search_service()
    provider = await search_service.initialize()

    logger.info(f"GST Case Search started with provider {provider.value}")

    yield

    logger.info("Shutting down GST Case Search...")

    # Cleanup resources
    if search_service:
        await search_service.close()

    logger.info("GST Case Search shut down successfully")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Global search across cases, clients, tasks, documents and hearings",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(
    request: Request, status_code: int, error: str, detail: str
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            detail=detail,
            timestamp=datetime.now(UTC),
            request_id=request_id,
            path=request.url.path,
        ).model_dump(mode="json"),
    )


@app.middleware("http")
async def request_middleware(request: Request, call_next):
    """Add request ID tracking and error handling."""
    # Generate unique request ID
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    set_request_id(request_id)

    try:
        logger.info(f"Request started: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(
            f"Request completed: {request.method} {request.url.path} - Status: {response.status_code}"
        )
        return response
    except Exception as e:
        logger.error(
            f"Unhandled exception: {str(e)}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            str(e),
        )
    finally:
        clear_request_id()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    # Format validation errors
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    detail = "; ".join(errors)
    logger.warning(f"Validation error: {detail}", extra={"path": request.url.path})

    return _error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", detail
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle invalid search parameters (scope, limit, cursor)."""
    logger.warning(f"Invalid request parameters: {exc}")
    return _error_response(request, status.HTTP_400_BAD_REQUEST, "Bad Request", str(exc))


@app.exception_handler(SearchCancelledError)
async def search_cancelled_handler(request: Request, exc: SearchCancelledError):
    """A newer search superseded this one; clients simply ignore it."""
    logger.debug(f"Search superseded: {exc.query}")
    return _error_response(request, status.HTTP_409_CONFLICT, "Search Cancelled", str(exc))


def get_search_service() -> SearchService:
    if not search_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service not initialized",
        )
    return search_service


# API Endpoints


@app.get("/health")
async def health_check():
    """Health check endpoint with search provider info."""
    provider = search_service.get_provider() if search_service else None
    return {
        "status": "healthy",
        "service": settings.api_title,
        "version": settings.api_version,
        "provider": provider.value if provider else None,
    }


@app.get(
    "/api/v1/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    summary="Global search",
    description="Search cases, clients, tasks, documents and hearings.",
)
async def search(
    q: str = "",
    scope: SearchScope = SearchScope.ALL,
    limit: int = Query(default=settings.default_search_limit, ge=1, le=settings.max_search_limit),
    cursor: str | None = None,
    x_search_session: str = Header(default=DEFAULT_SESSION),
) -> SearchResponse:
    """Run a global search.

    Args:
        q: Query string; supports quotes and filename:/tag:/uploader:/case: operators
        scope: Entity collection to search, or ``all``
        limit: Page size
        cursor: ``next_cursor`` from the previous page
        x_search_session: Search bar identifier; a new search cancels only the
            in-flight search of the same session

    Returns:
        SearchResponse with one page of results
    """
    return await get_search_service().search(
        q, scope=scope, limit=limit, cursor=cursor, session_id=x_search_session
    )


@app.get(
    "/api/v1/search/suggest",
    response_model=list[SearchSuggestion],
    response_model_exclude_none=True,
    summary="Type-ahead suggestions",
)
async def suggest(
    q: str = "",
    limit: int = Query(default=settings.default_suggest_limit, ge=1, le=50),
) -> list[SearchSuggestion]:
    service = get_search_service()
    if not q.strip():
        return service.get_recent_search_suggestions(limit)
    return await service.suggest(q, limit=limit)


@app.get("/api/v1/search/recent", response_model=list[str], summary="Recent searches")
async def recent_searches() -> list[str]:
    return get_search_service().get_recent_searches()


@app.get("/api/v1/search/provider", summary="Current search provider")
async def get_provider():
    provider = get_search_service().get_provider()
    return {"provider": provider.value if provider else None}


@app.post("/api/v1/search/provider/refresh", summary="Force provider re-probe")
async def refresh_provider():
    """Clear caches and re-probe the search provider."""
    service = get_search_service()
    await service.refresh_search_data()
    provider = await service.initialize()
    return {"provider": provider.value}


@app.post(
    "/api/v1/search/index/rebuild",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Rebuild the search index",
)
async def rebuild_index(scope: str = "documents"):
    await get_search_service().rebuild_index(scope)
    return {"status": "accepted", "scope": scope}


@app.post(
    "/api/v1/search/index/doc/{doc_id}",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Reindex one document",
)
async def reindex_document(doc_id: str):
    await get_search_service().reindex_document(doc_id)
    return {"status": "accepted", "doc_id": doc_id}


@app.delete(
    "/api/v1/search/index/doc/{doc_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a document from the index",
)
async def remove_from_index(doc_id: str) -> None:
    await get_search_service().remove_from_index(doc_id)


@app.get("/api/v1/search/index/stats", response_model=IndexStats, summary="Index statistics")
async def index_stats() -> IndexStats:
    return await get_search_service().get_index_stats()


@app.get(
    "/api/v1/search/history",
    response_model=list[QueryHistoryItem],
    summary="Recently executed queries (diagnostics)",
)
async def query_history() -> list[QueryHistoryItem]:
    return get_search_service().get_query_history()


@app.post("/api/v1/search/cache/clear", summary="Clear search cache and history")
async def clear_cache():
    await get_search_service().clear_cache()
    return {"status": "cleared"}
