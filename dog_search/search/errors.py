"""Exceptions raised by the search pipeline and its collaborators."""

from __future__ import annotations


class SearchError(RuntimeError):
    """Base class for search failures."""


class QueryValidationError(SearchError):
    """Raised when a processed query has nothing searchable or a bad location."""


class UpstreamError(SearchError):
    """Raised when a collaborator (store, geocoder) fails."""


class StoreError(UpstreamError):
    """Raised when the data store cannot execute a query."""


class GeocodingError(UpstreamError):
    """Raised when an address cannot be geocoded."""
