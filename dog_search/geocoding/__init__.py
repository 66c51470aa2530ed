from .client import Coordinates, GazetteerGeocoder, Geocoder, NominatimGeocoder, build_geocoder

__all__ = [
    "Coordinates",
    "GazetteerGeocoder",
    "Geocoder",
    "NominatimGeocoder",
    "build_geocoder",
]
