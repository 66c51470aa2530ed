"""Static place tables: service-area cities, ZIP centroids and state centroids."""

from __future__ import annotations

import re
from dataclasses import dataclass

_ZIP_RE = re.compile(r"^\d{5}$")


@dataclass(frozen=True)
class StateLocation:
    lat: float
    lng: float
    city: str
    zip: str
    name: str
    abbreviation: str


STATES: dict[str, StateLocation] = {
    "IN": StateLocation(39.9568, -86.0075, "Fishers", "46037", "Indiana", "IN"),
    "IL": StateLocation(41.8781, -87.6298, "Chicago", "60601", "Illinois", "IL"),
    "OH": StateLocation(39.9612, -82.9988, "Columbus", "43215", "Ohio", "OH"),
    "MI": StateLocation(42.3314, -83.0458, "Detroit", "48201", "Michigan", "MI"),
    "KY": StateLocation(38.2527, -85.7585, "Louisville", "40202", "Kentucky", "KY"),
}

# Keywords accepted when resolving a state token. Extraction only looks for the
# full names, since "in", "oh" and "mi" are ordinary words in a query.
STATE_KEYWORDS: dict[str, tuple[str, ...]] = {
    code: (state.name.lower(), code.lower()) for code, state in STATES.items()
}

CITY_COORDINATES: dict[str, tuple[float, float]] = {
    "indianapolis": (39.7684, -86.1581),
    "fishers": (39.9568, -86.0075),
    "carmel": (39.9784, -86.1180),
    "noblesville": (40.0456, -86.0086),
    "westfield": (40.0428, -86.1275),
    "greenwood": (39.6137, -86.1067),
    "avon": (39.7628, -86.3997),
    "plainfield": (39.7042, -86.3994),
    "zionsville": (39.9509, -86.2619),
    "brownsburg": (39.8434, -86.3978),
    "danville": (39.7606, -86.5264),
    "pittsboro": (39.8642, -86.4670),
    "lizton": (39.8845, -86.5428),
    "coatesville": (39.6878, -86.6705),
    "clayton": (39.6892, -86.5228),
    "amity": (39.4220, -86.0008),
    "bainbridge": (39.7611, -86.8117),
}

CITY_ALIASES: dict[str, str] = {"indy": "indianapolis"}

# Names recognised in query text, aliases included
CITY_NAMES: tuple[str, ...] = tuple(CITY_COORDINATES) + tuple(CITY_ALIASES)

ZIP_COORDINATES: dict[str, tuple[float, float]] = {
    "46204": (39.7714, -86.1576),
    "46220": (39.8676, -86.1082),
    "46240": (39.9058, -86.1228),
    "46250": (39.9072, -86.0661),
    "46256": (39.9063, -86.0127),
    "46280": (39.9417, -86.1389),
    "46037": (39.9608, -85.9479),
    "46038": (39.9669, -86.0143),
    "46032": (39.9657, -86.1727),
    "46033": (39.9765, -86.0838),
    "46060": (40.0649, -85.9326),
    "46074": (40.0370, -86.1577),
    "46142": (39.6228, -86.1781),
    "46143": (39.5943, -86.1083),
    "46123": (39.7633, -86.3997),
    "46168": (39.6915, -86.3899),
    "46077": (39.9665, -86.2964),
    "46112": (39.8612, -86.3859),
    "46122": (39.7723, -86.5250),
}


def is_zip(token: str) -> bool:
    return bool(_ZIP_RE.match(token or ""))


def canonical_city(name: str) -> str | None:
    """Return the gazetteer name for a city or alias, or ``None``."""
    key = (name or "").strip().lower()
    key = CITY_ALIASES.get(key, key)
    return key if key in CITY_COORDINATES else None


def state_from_keyword(keyword: str) -> str | None:
    normalized = (keyword or "").strip().lower()
    for code, keywords in STATE_KEYWORDS.items():
        if normalized in keywords:
            return code
    return None


def state_location(keyword: str) -> StateLocation | None:
    code = state_from_keyword(keyword)
    return STATES[code] if code else None
