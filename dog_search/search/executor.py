from __future__ import annotations

import logging
import time
from typing import Any

from .builder import build_query
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .data_store import SearchStore
from .errors import StoreError
from .models import (
    AttemptRecord,
    MatchStrategy,
    ProcessedQuery,
    ResultLocation,
    SearchPage,
    SearchResponse,
    SearchResult,
)
from .predicates import StoreQuery

logger = logging.getLogger(__name__)

STRATEGY_ORDER: tuple[MatchStrategy, ...] = (
    MatchStrategy.exact,
    MatchStrategy.fuzzy,
    MatchStrategy.broad,
)

# Filters dropped when an attempt comes back empty
RELAXABLE_FILTERS: tuple[str, ...] = ("rating", "organic")


def _float(value: Any, default: float | None = 0.0) -> float | None:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def row_to_result(row: dict[str, Any], index: int = 0) -> SearchResult:
    """Map a store row onto the public result shape."""
    tags = row.get("tags") or []
    return SearchResult(
        id=str(row.get("id") or f"temp-{index}"),
        name=str(row.get("name") or "Unknown Service"),
        type="product" if row.get("type") == "product" else "service",
        service_type=str(row.get("service_type") or ""),
        description=str(row.get("description") or ""),
        rating=_float(row.get("rating")) or 0.0,
        review_count=int(_float(row.get("review_count")) or 0),
        price=_float(row.get("price"), default=None),
        location=ResultLocation(
            lat=_float(row.get("lat"), default=None),
            lng=_float(row.get("lng"), default=None),
            city=row.get("city"),
            state=row.get("state"),
            zip_code=None if row.get("zip_code") is None else str(row.get("zip_code")),
        ),
        tags=set(tags),
        is_mobile=bool(row.get("is_mobile")),
        is_emergency=bool(row.get("is_emergency")),
    )


def expand_criteria(query: ProcessedQuery, config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> None:
    """Widen the radius and drop restrictive filters, in place.

    Only ever called on the executor's private working copy.
    """
    if query.location is not None:
        query.location.radius = min(query.location.radius * config.expansion_factor, config.max_radius)
    for key in RELAXABLE_FILTERS:
        query.filters.pop(key, None)


class SearchExecutor:
    def __init__(self, store: SearchStore, config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> None:
        self._store = store
        self._config = config

    def search_once(self, store_query: StoreQuery) -> SearchPage:
        """Run one query plus its count. Store failures propagate."""
        try:
            rows = self._store.find(store_query)
            total = self._store.count(store_query.where)
        except StoreError:
            raise
        except Exception as exc:
            raise StoreError(f"Store query failed: {exc}") from exc

        results = [row_to_result(row, i) for i, row in enumerate(rows)]
        return SearchPage(results=results, total_count=total)

    def search_progressive(self, query: ProcessedQuery) -> SearchResponse:
        """Try exact, fuzzy then broad matching until something comes back."""
        start_time = time.time()
        working = query.model_copy(deep=True)
        strategies = STRATEGY_ORDER[: max(1, min(self._config.max_attempts, len(STRATEGY_ORDER)))]
        attempts: list[AttemptRecord] = []

        for number, strategy in enumerate(strategies, start=1):
            radius = working.location.radius if working.location else None
            store_query = build_query(working, strategy, self._config)

            try:
                page = self.search_once(store_query)
            except StoreError as exc:
                logger.warning("Search attempt %d (%s) failed", number, strategy.value, exc_info=True)
                attempts.append(AttemptRecord(strategy=strategy, radius=radius, error=str(exc)))
                page = None
            else:
                attempts.append(
                    AttemptRecord(strategy=strategy, radius=radius, result_count=len(page.results))
                )

            if page is not None and page.results:
                elapsed_ms = round((time.time() - start_time) * 1000, 1)
                logger.info(
                    "Search %r matched %d rows on attempt %d (%s) in %sms",
                    query.normalized_query,
                    page.total_count,
                    number,
                    strategy.value,
                    elapsed_ms,
                )
                return SearchResponse(
                    results=page.results,
                    total_count=page.total_count,
                    has_more=page.total_count > len(page.results),
                    query=working,
                    strategy=strategy,
                    attempts=attempts,
                )

            if number < len(strategies):
                expand_criteria(working, self._config)

        logger.info("Search %r found nothing after %d attempts", query.normalized_query, len(attempts))
        return SearchResponse(
            results=[],
            total_count=0,
            has_more=False,
            query=query,
            strategy=None,
            attempts=attempts,
        )
