from __future__ import annotations

import logging
import re

from .gazetteer import CITY_NAMES, STATES
from .models import ExtractedEntities, FilterValue
from .synonyms import DEFAULT_REGISTRY, SynonymRegistry

logger = logging.getLogger(__name__)

NEAR_ME = "near_me"

# ---------------------------------------------------------------------------
# Keyword patterns (canonical tag -> pattern, matched anywhere in the query)
# ---------------------------------------------------------------------------

_SERVICE_PATTERNS: dict[str, re.Pattern[str]] = {
    "groomer": re.compile(r"grooming?|groomer|salon|spa|wash|bath|trim|cut|style|groom"),
    "dog_trainer": re.compile(r"training?|trainer|obedience|behavior|puppy|agility"),
    "veterinarian": re.compile(
        r"veterinary|vet|veterinarian|clinic|hospital|emergency|urgent|surgery|health|holistic"
    ),
    "boarding_daycare": re.compile(
        r"daycare|day care|boarding|kennel|pet sitting|sitter|overnight|pet care"
    ),
    "dog_park": re.compile(r"dog parks?|parks?|playground|play area|off leash|fenced|outdoor"),
    "pet_products": re.compile(
        r"products|supplies|food|toys|beds|collars|leashes|treats|accessories|pet store|pet shop"
    ),
    "apartments": re.compile(r"apartments?|rentals?|housing|residence|residential|pet friendly"),
    "landscape_contractors": re.compile(
        r"landscaping|landscape|yard|garden|outdoor|maintenance|contractors?"
    ),
}

_PRODUCT_PATTERNS: dict[str, re.Pattern[str]] = {
    "food": re.compile(r"food|kibble|canned|raw|fresh|homemade|organic|grain free"),
    "toys": re.compile(r"toys?|chew toy|ball|frisbee|rope|tug|interactive|puzzle"),
    "beds": re.compile(r"beds?|bedding|crate|mat|cushion|pillow|nest"),
    "collars": re.compile(r"collars?|harness|leash(?:es)?|tags?|identification"),
    "treats": re.compile(r"treats?|snacks?|biscuits?|rewards?"),
    "supplements": re.compile(r"supplements?|vitamins?|probiotics?|oils?"),
    "accessories": re.compile(
        r"bowls?|feeder|water|clothing|costume|jacket|sweater|boots|shoes"
    ),
}

_NEAR_ME_RE = re.compile(r"near me|close to me|nearby|local|in my area|around here")
_ZIP_RE = re.compile(r"\b\d{5}\b")
_STATE_NAME_RES: dict[str, re.Pattern[str]] = {
    code: re.compile(rf"\b{re.escape(state.name.lower())}\b") for code, state in STATES.items()
}

# Availability is checked in this order and the later hit overwrites the earlier
_AVAILABILITY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("24_7", re.compile(r"24/7|24-7|24 7|24 hours|24hr|24 hr|all day|all night|overnight")),
    ("emergency", re.compile(r"emergency|urgent|immediate|asap|right now|\bnow\b")),
]
_MOBILE_RE = re.compile(r"mobile|house call|house-call|come to me|at home|in home")
_PREMIUM_RE = re.compile(r"premium|luxury|high-end|high end|best|top rated|top-rated|excellent|quality")
_BUDGET_RE = re.compile(r"cheap|budget|affordable|inexpensive|low cost|low-cost")
_ORGANIC_RE = re.compile(r"organic|natural|holistic|homeopathic|alternative")
_SENIOR_RE = re.compile(r"senior|elderly|\bold\b|aging|geriatric")
_PUPPY_RE = re.compile(r"puppy|young|baby|newborn")
_SIZE_RE = re.compile(r"large|big|giant|small|tiny|toy|mini")
_RATING_RE = re.compile(r"(\d+)\+?\s*(?:star|stars|rating|rated)\b")

_SIZE_LEVELS: list[tuple[str, re.Pattern[str]]] = [
    ("large", re.compile(r"large|big|giant|huge")),
    ("medium", re.compile(r"medium|average|standard")),
    ("small", re.compile(r"small|tiny|toy|mini|miniature")),
]

_MODIFIER_GROUPS: list[re.Pattern[str]] = [
    re.compile(r"best|top|excellent|amazing|outstanding|superior"),
    re.compile(r"cheap|affordable|budget|inexpensive|reasonable"),
    re.compile(r"fast|quick|rapid|swift|immediate"),
    re.compile(r"friendly|kind|caring|gentle|patient"),
    re.compile(r"experienced|professional|certified|licensed|qualified"),
    re.compile(r"convenient|accessible|easy|simple|straightforward"),
]


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _matching_tags(query: str, patterns: dict[str, re.Pattern[str]]) -> set[str]:
    return {tag for tag, pattern in patterns.items() if pattern.search(query)}


def extract_locations(query: str) -> set[str]:
    locations = {city for city in CITY_NAMES if city in query}
    if _NEAR_ME_RE.search(query):
        locations.add(NEAR_ME)
    locations.update(_ZIP_RE.findall(query))
    for code, pattern in _STATE_NAME_RES.items():
        if pattern.search(query):
            locations.add(code)
    return locations


def _size_filter(query: str) -> str:
    for size, pattern in _SIZE_LEVELS:
        if pattern.search(query):
            return size
    return "any"


def extract_filters(query: str) -> dict[str, FilterValue]:
    filters: dict[str, FilterValue] = {}

    for value, pattern in _AVAILABILITY_PATTERNS:
        if pattern.search(query):
            filters["availability"] = value

    if _MOBILE_RE.search(query):
        filters["mobile"] = True

    if _PREMIUM_RE.search(query):
        filters["quality"] = "premium"
    elif _BUDGET_RE.search(query):
        filters["quality"] = "budget"

    if _ORGANIC_RE.search(query):
        filters["organic"] = True
    if _SENIOR_RE.search(query):
        filters["senior"] = True
    if _PUPPY_RE.search(query):
        filters["puppy"] = True
    if _SIZE_RE.search(query):
        filters["size"] = _size_filter(query)

    rating = _RATING_RE.search(query)
    if rating:
        filters["min_rating"] = int(rating.group(1))

    return filters


def extract_modifiers(query: str) -> set[str]:
    modifiers: set[str] = set()
    for pattern in _MODIFIER_GROUPS:
        modifiers.update(m.lower() for m in pattern.findall(query))
    return modifiers


def extract_entities(
    query: str,
    registry: SynonymRegistry = DEFAULT_REGISTRY,
) -> ExtractedEntities:
    """Pull service/product types, locations, filters and modifiers out of a
    normalised query. Never raises; empty input yields empty entities."""
    text = (query or "").lower().strip()
    if not text:
        return ExtractedEntities()

    entities = ExtractedEntities(
        services=_matching_tags(text, _SERVICE_PATTERNS) | registry.find_in_text("services", text),
        products=_matching_tags(text, _PRODUCT_PATTERNS) | registry.find_in_text("products", text),
        locations=extract_locations(text),
        filters=extract_filters(text),
        modifiers=extract_modifiers(text),
    )
    logger.debug("Extracted entities from %r: %s", text, entities.model_dump())
    return entities
