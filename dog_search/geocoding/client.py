"""Geocoding oracles: a Nominatim HTTP client and an offline gazetteer lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from ..search.errors import GeocodingError
from ..search.gazetteer import CITY_COORDINATES, ZIP_COORDINATES, canonical_city, state_location
from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


class Geocoder(Protocol):
    def geocode(self, address: str) -> Coordinates:
        """Return coordinates for ``address`` or raise ``GeocodingError``."""
        ...


class NominatimGeocoder:
    """Client for the OpenStreetMap Nominatim search endpoint."""

    def __init__(
        self,
        config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    def geocode(self, address: str) -> Coordinates:
        params = {"format": "json", "q": address, "limit": 1}
        headers = {"User-Agent": self._config.user_agent}
        try:
            response = self._session.get(
                f"{self._config.base_url.rstrip('/')}/search",
                params=params,
                headers=headers,
                timeout=self._config.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("geocode request failed for %r: %s", address, exc)
            raise GeocodingError(f"Geocoding request failed for {address!r}") from exc

        if not payload:
            raise GeocodingError(f"No geocoding match for {address!r}")

        try:
            return Coordinates(lat=float(payload[0]["lat"]), lng=float(payload[0]["lon"]))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise GeocodingError(f"Malformed geocoding response for {address!r}") from exc


class GazetteerGeocoder:
    """Offline geocoder backed by the static ZIP, city and state tables."""

    def geocode(self, address: str) -> Coordinates:
        token = (address or "").split(",")[0].strip().lower()

        if token in ZIP_COORDINATES:
            lat, lng = ZIP_COORDINATES[token]
            return Coordinates(lat, lng)

        city = canonical_city(token)
        if city:
            lat, lng = CITY_COORDINATES[city]
            return Coordinates(lat, lng)

        state = state_location(token)
        if state:
            return Coordinates(state.lat, state.lng)

        raise GeocodingError(f"{address!r} is not in the gazetteer")


def build_geocoder(config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG) -> Geocoder:
    if config.provider == "nominatim":
        return NominatimGeocoder(config)
    if config.provider == "gazetteer":
        return GazetteerGeocoder()
    raise ValueError(f"Unknown geocoder provider: {config.provider!r}")
