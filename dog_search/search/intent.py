from __future__ import annotations

from .models import ExtractedEntities, SearchIntent, SearchType


def classify_intent(entities: ExtractedEntities, query: str = "") -> SearchIntent:
    """Derive a search category and confidence from extracted entities."""
    confidence = 0.5
    category: SearchType = "mixed"
    description = ""

    services = sorted(entities.services)
    products = sorted(entities.products)

    if services and not products:
        category = "service"
        confidence += 0.3
        description = f"Looking for {', '.join(services)} services"
    elif products and not services:
        category = "product"
        confidence += 0.3
        description = f"Looking for {', '.join(products)} products"
    elif services and products:
        category = "mixed"
        confidence += 0.2
        description = "Looking for services and products"
    elif entities.locations:
        category = "location"
        confidence += 0.2
        description = "Location-based search"

    # One boost per populated entity category
    for group in (entities.services, entities.products, entities.locations):
        if group:
            confidence += 0.1

    return SearchIntent(
        description=description,
        confidence=round(min(max(confidence, 0.0), 1.0), 4),
        category=category,
    )
