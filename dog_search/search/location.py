from __future__ import annotations

import logging
import math
from typing import Iterable

from ..geocoding.client import Geocoder
from .config import DEFAULT_SEARCH_CONFIG, EmptyLocationPolicy, SearchConfig
from .entities import NEAR_ME
from .errors import GeocodingError
from .gazetteer import CITY_COORDINATES, canonical_city, is_zip, state_location
from .models import ResolvedLocation, UserLocation

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _radius_for_distance(distance: float) -> float:
    """Wider radius for places far from the user."""
    if distance > 50:
        return 25.0
    if distance > 20:
        return 15.0
    return 10.0


class LocationResolver:
    """Turn location entities plus the user's position into a search centre."""

    def __init__(self, geocoder: Geocoder, config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> None:
        self._geocoder = geocoder
        self._config = config

    def resolve(
        self,
        location_entities: Iterable[str],
        user_location: UserLocation,
    ) -> ResolvedLocation | None:
        # Sorted so ties resolve alphabetically; extraction yields an unordered set
        entities = sorted(set(location_entities))

        if not entities:
            if self._config.empty_location_policy is EmptyLocationPolicy.no_filter:
                return None
            return self._at_user(user_location, self._config.default_radius, 0.8)

        if NEAR_ME in entities:
            return self._at_user(user_location, self._config.near_me_radius, 0.9, is_near_me=True)

        best: ResolvedLocation | None = None
        for entity in entities:
            candidate = self._resolve_single(entity, user_location)
            # Strictly greater, so the first entity wins a tie
            if best is None or candidate.confidence > best.confidence:
                best = candidate

        if best is None or best.confidence <= 0:
            return self._at_user(user_location, 10.0, 0.3)
        return best

    # ── Single-entity resolution ────────────────────────────────────────

    def _resolve_single(self, entity: str, user: UserLocation) -> ResolvedLocation:
        if is_zip(entity):
            return self._resolve_zip(entity, user)

        city = canonical_city(entity)
        if city:
            return self._resolve_city(city, user)

        state = state_location(entity)
        if state:
            return ResolvedLocation(
                lat=state.lat,
                lng=state.lng,
                radius=self._config.default_radius,
                city=state.city,
                state=state.abbreviation,
                zip_code=state.zip,
                confidence=0.7,
            )

        return self._at_user(user, 10.0, 0.1)

    def _geocode(self, address: str) -> tuple[float, float] | None:
        try:
            coords = self._geocoder.geocode(address)
        except GeocodingError:
            logger.warning("Geocoding failed for %r, using fallback", address, exc_info=True)
            return None
        if not (math.isfinite(coords.lat) and math.isfinite(coords.lng)):
            return None
        return coords.lat, coords.lng

    def _resolve_zip(self, zip_code: str, user: UserLocation) -> ResolvedLocation:
        region = self._config.region
        coords = self._geocode(f"{zip_code}, {region}")
        if coords:
            return ResolvedLocation(
                lat=coords[0],
                lng=coords[1],
                radius=10.0,
                zip_code=zip_code,
                state=region,
                confidence=0.9,
            )
        # Could not place the ZIP, so search wider around the user
        return ResolvedLocation(
            lat=user.lat,
            lng=user.lng,
            radius=25.0,
            zip_code=zip_code,
            state=region,
            confidence=0.6,
        )

    def _resolve_city(self, city: str, user: UserLocation) -> ResolvedLocation:
        region = self._config.region
        coords = self._geocode(f"{city}, {region}")
        if coords:
            distance = haversine_miles(user.lat, user.lng, coords[0], coords[1])
            return ResolvedLocation(
                lat=coords[0],
                lng=coords[1],
                radius=_radius_for_distance(distance),
                city=city.title(),
                state=region,
                confidence=0.85,
            )
        return ResolvedLocation(
            lat=user.lat,
            lng=user.lng,
            radius=20.0,
            city=city.title(),
            state=region,
            confidence=0.5,
        )

    @staticmethod
    def _at_user(
        user: UserLocation,
        radius: float,
        confidence: float,
        is_near_me: bool = False,
    ) -> ResolvedLocation:
        return ResolvedLocation(
            lat=user.lat,
            lng=user.lng,
            radius=radius,
            city=user.city,
            state=user.state,
            zip_code=user.zip,
            is_near_me=is_near_me,
            confidence=confidence,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def expand_search_radius(
    location: ResolvedLocation,
    factor: float = 2.0,
    max_radius: float = 100.0,
) -> ResolvedLocation:
    """Return a copy with a wider radius and slightly lower confidence."""
    return location.model_copy(
        update={
            "radius": min(location.radius * factor, max_radius),
            "confidence": max(location.confidence - 0.1, 0.1),
        }
    )


def nearby_cities(lat: float, lng: float, radius: float) -> list[dict]:
    """Gazetteer cities within ``radius`` miles, nearest first."""
    cities = []
    for name, (city_lat, city_lng) in CITY_COORDINATES.items():
        distance = haversine_miles(lat, lng, city_lat, city_lng)
        if distance <= radius:
            cities.append({
                "name": name.title(),
                "lat": city_lat,
                "lng": city_lng,
                "distance": round(distance, 1),
            })
    return sorted(cities, key=lambda c: c["distance"])
