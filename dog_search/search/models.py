from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_serializer

SearchType = Literal["service", "product", "mixed", "location"]
FilterValue = str | bool | int | float


class MatchStrategy(str, Enum):
    """Predicate stringency, tried in declaration order by progressive search."""

    exact = "exact"
    fuzzy = "fuzzy"
    broad = "broad"


# ── Query interpretation ────────────────────────────────────────────────


class UserLocation(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    zip: str | None = None
    city: str | None = None
    state: str | None = None


class ResolvedLocation(BaseModel):
    lat: float
    lng: float
    radius: float = Field(..., gt=0.0, description="Search radius in miles")
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    is_near_me: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ExtractedEntities(BaseModel):
    services: set[str] = Field(default_factory=set)
    products: set[str] = Field(default_factory=set)
    locations: set[str] = Field(default_factory=set)
    filters: dict[str, FilterValue] = Field(default_factory=dict)
    modifiers: set[str] = Field(default_factory=set)

    @field_serializer("services", "products", "locations", "modifiers")
    def _sorted_sets(self, value: set[str]) -> list[str]:
        return sorted(value)


class SearchIntent(BaseModel):
    description: str = ""
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    category: SearchType = "mixed"


class ProcessedQuery(BaseModel):
    original_query: str
    normalized_query: str
    search_type: SearchType = "service"
    entities: ExtractedEntities = Field(default_factory=ExtractedEntities)
    location: ResolvedLocation | None = None
    filters: dict[str, FilterValue] = Field(default_factory=dict)
    intent: str = ""
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


# ── Retrieval ───────────────────────────────────────────────────────────


class ResultLocation(BaseModel):
    lat: float | None = None
    lng: float | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class SearchResult(BaseModel):
    id: str
    name: str
    type: Literal["service", "product"] = "service"
    service_type: str = ""
    description: str = ""
    rating: float = 0.0
    review_count: int = 0
    price: float | None = None
    location: ResultLocation = Field(default_factory=ResultLocation)
    tags: set[str] = Field(default_factory=set)
    is_mobile: bool = False
    is_emergency: bool = False
    distance: float | None = None

    @field_serializer("tags")
    def _sorted_tags(self, value: set[str]) -> list[str]:
        return sorted(value)


class SearchPage(BaseModel):
    results: list[SearchResult]
    total_count: int


class AttemptRecord(BaseModel):
    strategy: MatchStrategy
    radius: float | None = None
    result_count: int = 0
    error: str | None = None


class SearchResponse(BaseModel):
    results: list[SearchResult]
    total_count: int
    has_more: bool = False
    query: ProcessedQuery
    strategy: MatchStrategy | None = None
    attempts: list[AttemptRecord] = Field(default_factory=list)


class ResultsMetadata(BaseModel):
    total_results: int
    search_radius: float | None = None
    query_interpretation: str = ""
    filters_applied: dict[str, FilterValue] = Field(default_factory=dict)


class FormattedResults(BaseModel):
    results: list[SearchResult]
    metadata: ResultsMetadata


# ── API payloads ────────────────────────────────────────────────────────


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    user_location: UserLocation | None = None


class SearchApiResponse(BaseModel):
    results: list[SearchResult]
    metadata: ResultsMetadata
    processed_query: ProcessedQuery
    strategy: MatchStrategy | None = None
    attempts: list[AttemptRecord] = Field(default_factory=list)


class ParseResponse(BaseModel):
    processed_query: ProcessedQuery
    valid: bool


class DirectoryPage(BaseModel):
    services: list[SearchResult]
    total: int
    total_pages: int
    page: int
    per_page: int
    cached: bool = False


class CacheInvalidateRequest(BaseModel):
    service_type: str | None = None
    state: str | None = None
    zip_code: str | None = None
