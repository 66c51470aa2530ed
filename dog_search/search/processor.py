from __future__ import annotations

import logging
import math

from .entities import extract_entities
from .errors import QueryValidationError
from .intent import classify_intent
from .location import LocationResolver
from .models import (
    ExtractedEntities,
    FilterValue,
    ProcessedQuery,
    ResolvedLocation,
    SearchIntent,
    SearchType,
    UserLocation,
)
from .normalizer import normalize_query
from .synonyms import DEFAULT_REGISTRY, SynonymRegistry

logger = logging.getLogger(__name__)

# Entity filters that become search restrictions or orderings
_FORWARDED_FILTERS = frozenset({"availability", "mobile", "quality", "organic", "min_rating"})


def _search_type(entities: ExtractedEntities) -> SearchType:
    if entities.services and entities.products:
        return "mixed"
    if entities.services:
        return "service"
    if entities.products:
        return "product"
    # Nothing specific detected; treat it as a service search
    return "service"


def build_filters(
    entities: ExtractedEntities,
    location: ResolvedLocation | None,
) -> dict[str, FilterValue]:
    filters: dict[str, FilterValue] = {}
    for key, value in entities.filters.items():
        # size, senior and puppy describe the dog, not the listing
        if key not in _FORWARDED_FILTERS:
            continue
        # The store filters on "rating"; extraction reports the minimum as min_rating
        filters["rating" if key == "min_rating" else key] = value

    if location is not None:
        if location.city:
            filters["city"] = location.city
        if location.state:
            filters["state"] = location.state
        if location.zip_code:
            filters["zip_code"] = location.zip_code
    return filters


def score_confidence(
    entities: ExtractedEntities,
    location: ResolvedLocation | None,
    intent: SearchIntent,
) -> float:
    confidence = 0.5
    if entities.services:
        confidence += 0.2
    if entities.products:
        confidence += 0.2
    if entities.locations:
        confidence += 0.15

    if location is not None:
        if location.city or location.zip_code:
            confidence += 0.1
        if location.lat and location.lng:
            confidence += 0.05

    confidence += intent.confidence * 0.1
    return round(min(confidence, 1.0), 4)


def validate_processed_query(query: ProcessedQuery) -> bool:
    """True when the query has something to search for and a sane location."""
    if not query.entities.services and not query.entities.products:
        return False

    location = query.location
    if location is not None:
        if not (math.isfinite(location.lat) and math.isfinite(location.lng)):
            return False
        if not location.lat or not location.lng:
            return False
        if not (-90 <= location.lat <= 90 and -180 <= location.lng <= 180):
            return False
        if location.radius < 1 or location.radius > 100:
            return False
    return True


class QueryProcessor:
    """Runs normalise -> extract -> classify -> resolve for one query."""

    def __init__(
        self,
        resolver: LocationResolver,
        registry: SynonymRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self._resolver = resolver
        self._registry = registry

    def process(self, raw_text: str, user_location: UserLocation) -> ProcessedQuery:
        normalized = normalize_query(raw_text)
        entities = extract_entities(normalized, self._registry)
        intent = classify_intent(entities, normalized)
        location = self._resolver.resolve(entities.locations, user_location)

        processed = ProcessedQuery(
            original_query=raw_text or "",
            normalized_query=normalized,
            search_type=_search_type(entities),
            entities=entities,
            location=location,
            filters=build_filters(entities, location),
            intent=intent.description,
            confidence=score_confidence(entities, location, intent),
        )
        logger.info(
            "Processed query %r: type=%s confidence=%.2f",
            normalized,
            processed.search_type,
            processed.confidence,
        )
        return processed

    def process_validated(self, raw_text: str, user_location: UserLocation) -> ProcessedQuery:
        processed = self.process(raw_text, user_location)
        if not validate_processed_query(processed):
            if not processed.entities.services and not processed.entities.products:
                raise QueryValidationError(
                    "Could not find a service or product type in the query"
                )
            raise QueryValidationError("Resolved location has invalid coordinates or radius")
        return processed
