from __future__ import annotations

import math

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import MatchStrategy, ProcessedQuery, ResolvedLocation
from .predicates import (
    Contains,
    Equals,
    Or,
    Predicate,
    Range,
    SortKey,
    StoreQuery,
    all_of,
    any_of,
)

MILES_PER_DEGREE_LAT = 69.0

# ---------------------------------------------------------------------------
# Match clauses, one per strategy
# ---------------------------------------------------------------------------


def _significant_words(text: str) -> list[str]:
    return [word for word in text.split(" ") if len(word) > 2]


def _product_clauses(query: ProcessedQuery) -> list[Predicate]:
    return [Contains(field="category", value=p) for p in sorted(query.entities.products)]


def _exact_match(query: ProcessedQuery) -> Or:
    clauses: list[Predicate] = [
        Equals(field="service_type", value=s) for s in sorted(query.entities.services)
    ]
    clauses.extend(_product_clauses(query))
    if query.normalized_query:
        clauses.append(Contains(field="name", value=query.normalized_query))
    return any_of(*clauses)


def _fuzzy_match(query: ProcessedQuery) -> Or:
    clauses: list[Predicate] = [
        Equals(field="service_type", value=s) for s in sorted(query.entities.services)
    ]
    clauses.extend(_product_clauses(query))
    for word in _significant_words(query.normalized_query):
        clauses.append(Contains(field="name", value=word))
        clauses.append(Contains(field="description", value=word))
    return any_of(*clauses)


def _broad_match(query: ProcessedQuery) -> Or:
    clauses: list[Predicate] = [
        any_of(
            Equals(field="service_type", value=s),
            Contains(field="tags", value=s),
        )
        for s in sorted(query.entities.services)
    ]
    clauses.extend(_product_clauses(query))
    # Only the leading words, for the widest net
    for word in _significant_words(query.normalized_query)[:2]:
        clauses.append(Contains(field="name", value=word))
        clauses.append(Contains(field="description", value=word))
        clauses.append(Contains(field="tags", value=word))
    return any_of(*clauses)


_MATCHERS = {
    MatchStrategy.exact: _exact_match,
    MatchStrategy.fuzzy: _fuzzy_match,
    MatchStrategy.broad: _broad_match,
}

# ---------------------------------------------------------------------------
# Filters, location and ordering
# ---------------------------------------------------------------------------


def _text_tag(word: str) -> Or:
    return any_of(
        Contains(field="tags", value=word),
        Contains(field="description", value=word),
    )


def filter_clauses(filters: dict) -> list[Predicate]:
    clauses: list[Predicate] = []

    rating = filters.get("rating")
    if rating:
        clauses.append(Range(field="rating", gte=float(rating)))

    if filters.get("mobile"):
        clauses.append(Equals(field="is_mobile", value=True))

    availability = filters.get("availability")
    if availability == "24_7":
        clauses.append(Equals(field="is_24_hours", value=True))
    elif availability == "emergency":
        clauses.append(Equals(field="is_emergency", value=True))

    if filters.get("organic"):
        clauses.append(_text_tag("organic"))

    size = filters.get("size")
    if size and size != "any":
        clauses.append(_text_tag(str(size)))

    return clauses


def location_clauses(location: ResolvedLocation, match_locality: bool = False) -> list[Predicate]:
    """Bounding box around the centre, optionally pinned to city/state/ZIP."""
    lat_delta = location.radius / MILES_PER_DEGREE_LAT
    cos_lat = max(abs(math.cos(math.radians(location.lat))), 1e-6)
    lng_delta = location.radius / (MILES_PER_DEGREE_LAT * cos_lat)

    clauses: list[Predicate] = [
        Range(field="lat", gte=location.lat - lat_delta, lte=location.lat + lat_delta),
        Range(field="lng", gte=location.lng - lng_delta, lte=location.lng + lng_delta),
    ]

    if match_locality and not location.is_near_me:
        if location.city:
            clauses.append(Equals(field="city", value=location.city))
        if location.state:
            clauses.append(Equals(field="state", value=location.state))
        if location.zip_code:
            clauses.append(Equals(field="zip_code", value=location.zip_code))
    return clauses


def order_for(filters: dict) -> list[SortKey]:
    quality = filters.get("quality")
    if quality == "premium":
        return [
            SortKey(field="rating", descending=True),
            SortKey(field="review_count", descending=True),
            SortKey(field="price", descending=True),
        ]
    if quality == "budget":
        return [
            SortKey(field="price"),
            SortKey(field="rating", descending=True),
        ]
    return [
        SortKey(field="rating", descending=True),
        SortKey(field="review_count", descending=True),
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_query(
    query: ProcessedQuery,
    strategy: MatchStrategy = MatchStrategy.exact,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> StoreQuery:
    """Compile a processed query into a store query for one match strategy."""
    strategy = MatchStrategy(strategy)
    clauses: list[Predicate] = [_MATCHERS[strategy](query)]

    if strategy == MatchStrategy.broad:
        if query.search_type == "product":
            clauses.insert(0, Equals(field="in_stock", value=True))
        else:
            clauses.insert(0, Equals(field="is_active", value=True))

    clauses.extend(filter_clauses(query.filters))

    if query.location is not None:
        clauses.extend(location_clauses(query.location, config.match_locality))

    return StoreQuery(
        where=all_of(*clauses),
        order_by=order_for(query.filters),
        limit=config.page_size,
        offset=0,
        sort_by_distance=query.location is not None,
    )


def build_directory_query(
    service_type: str | None = None,
    state: str | None = None,
    zip_code: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> StoreQuery:
    """Plain listing used by the directory pages (no text interpretation)."""
    clauses: list[Predicate] = []
    if service_type:
        clauses.append(Equals(field="service_type", value=service_type))
    if state:
        clauses.append(Equals(field="state", value=state))
    if zip_code:
        clauses.append(Equals(field="zip_code", value=zip_code))
    return StoreQuery(
        where=all_of(*clauses),
        order_by=order_for({}),
        limit=per_page,
        offset=(page - 1) * per_page,
    )
