from __future__ import annotations

from .location import haversine_miles
from .models import (
    FormattedResults,
    ProcessedQuery,
    ResultsMetadata,
    SearchResponse,
    UserLocation,
)


def format_results(
    response: SearchResponse,
    user_location: UserLocation,
    query: ProcessedQuery,
) -> FormattedResults:
    """Attach distances (location searches only) and build response metadata."""
    results = [result.model_copy(deep=True) for result in response.results]

    if query.location is not None:
        for result in results:
            result.distance = round(
                haversine_miles(
                    user_location.lat,
                    user_location.lng,
                    result.location.lat or 0.0,
                    result.location.lng or 0.0,
                ),
                1,
            )
        # sorted() is stable, so equal distances keep the store's rating order
        results = sorted(results, key=lambda r: r.distance)
    else:
        for result in results:
            result.distance = None

    return FormattedResults(
        results=results,
        metadata=ResultsMetadata(
            total_results=response.total_count,
            search_radius=query.location.radius if query.location is not None else None,
            query_interpretation=query.intent,
            filters_applied=dict(query.filters),
        ),
    )
