"""
Directory data ingestion package.

Responsibilities:
- Read a raw export of directory listings (services and products).
- Normalize it into the canonical listing schema used by the search store.
- Persist the processed dataset locally for the search service.
"""
