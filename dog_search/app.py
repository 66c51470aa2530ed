from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query

from .geocoding.client import build_geocoder
from .search.builder import build_directory_query
from .search.cache import SearchCache
from .search.config import DEFAULT_SEARCH_CONFIG
from .search.data_store import get_store
from .search.errors import QueryValidationError, StoreError
from .search.executor import SearchExecutor
from .search.formatter import format_results
from .search.location import LocationResolver, nearby_cities
from .search.models import (
    CacheInvalidateRequest,
    DirectoryPage,
    ParseResponse,
    SearchApiResponse,
    SearchRequest,
    UserLocation,
)
from .search.processor import QueryProcessor, validate_processed_query
from .search.synonyms import DEFAULT_REGISTRY

logger = logging.getLogger(__name__)

# One cache per process, shared by every request
_cache = SearchCache(
    ttl_seconds=DEFAULT_SEARCH_CONFIG.cache_ttl_seconds,
    max_size=DEFAULT_SEARCH_CONFIG.cache_max_size,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _cache.start()
    try:
        yield
    finally:
        _cache.close()


app = FastAPI(title="Dog Services Directory Search API", version="1.0.0", lifespan=lifespan)


# ── Dependencies ─────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_processor() -> QueryProcessor:
    resolver = LocationResolver(build_geocoder(), DEFAULT_SEARCH_CONFIG)
    return QueryProcessor(resolver, DEFAULT_REGISTRY)


@lru_cache(maxsize=1)
def get_executor() -> SearchExecutor:
    return SearchExecutor(get_store(), DEFAULT_SEARCH_CONFIG)


def get_cache() -> SearchCache:
    return _cache


def _default_user_location() -> UserLocation:
    cfg = DEFAULT_SEARCH_CONFIG
    return UserLocation(
        lat=cfg.default_lat,
        lng=cfg.default_lng,
        zip=cfg.default_zip,
        city=cfg.default_city,
        state=cfg.default_state,
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/search", response_model=SearchApiResponse)
def search(
    body: SearchRequest,
    processor: QueryProcessor = Depends(get_processor),
    executor: SearchExecutor = Depends(get_executor),
) -> SearchApiResponse:
    # Requests without coordinates are interpreted around the configured default
    user_location = body.user_location or _default_user_location()

    try:
        processed = processor.process_validated(body.query, user_location)
    except QueryValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    response = executor.search_progressive(processed)
    formatted = format_results(response, user_location, response.query)

    return SearchApiResponse(
        results=formatted.results,
        metadata=formatted.metadata,
        processed_query=processed,
        strategy=response.strategy,
        attempts=response.attempts,
    )


@app.post("/search/parse", response_model=ParseResponse)
def parse(
    body: SearchRequest,
    processor: QueryProcessor = Depends(get_processor),
) -> ParseResponse:
    processed = processor.process(body.query, body.user_location or _default_user_location())
    return ParseResponse(processed_query=processed, valid=validate_processed_query(processed))


@app.get("/search/suggestions")
def suggestions(
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(10, ge=1, le=50),
) -> dict:
    terms = DEFAULT_REGISTRY.suggestions(q, limit)
    try:
        names = get_store().suggest(q, limit)
    except StoreError:
        logger.warning("Store suggestions unavailable", exc_info=True)
        names = []
    merged: list[str] = []
    for item in terms + names:
        if item not in merged:
            merged.append(item)
    return {"query": q, "suggestions": merged[:limit]}


@app.get("/directory", response_model=DirectoryPage)
def directory(
    service_type: str | None = None,
    state: str | None = None,
    zip_code: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    executor: SearchExecutor = Depends(get_executor),
    cache: SearchCache = Depends(get_cache),
) -> DirectoryPage:
    cached = cache.get_page(service_type, state, zip_code, page, per_page)
    if cached is not None:
        return cached.model_copy(update={"cached": True})

    query = build_directory_query(service_type, state, zip_code, page, per_page)
    try:
        result = executor.search_once(query)
    except StoreError as exc:
        logger.error("Directory listing failed: %s", exc)
        raise HTTPException(status_code=503, detail="Directory data is unavailable")

    listing = DirectoryPage(
        services=result.results,
        total=result.total_count,
        total_pages=math.ceil(result.total_count / per_page) if result.total_count else 0,
        page=page,
        per_page=per_page,
    )
    cache.set_page(service_type, state, zip_code, page, per_page, listing)
    return listing


@app.get("/locations/nearby")
def locations_nearby(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    radius: float = Query(25.0, gt=0.0, le=100.0),
) -> dict:
    return {"cities": nearby_cities(lat, lng, radius)}


# ── Cache endpoints ──────────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats(cache: SearchCache = Depends(get_cache)) -> dict:
    return cache.stats()


@app.post("/cache/invalidate")
def cache_invalidate(
    body: CacheInvalidateRequest,
    cache: SearchCache = Depends(get_cache),
) -> dict:
    removed = cache.invalidate(body.service_type, body.state, body.zip_code)
    return {"status": "invalidated", "removed": removed}
