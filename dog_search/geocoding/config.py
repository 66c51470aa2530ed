from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeocodingConfig:
    provider: str = os.getenv("GEOCODER_PROVIDER", "gazetteer")
    base_url: str = os.getenv("GEOCODER_BASE_URL", "https://nominatim.openstreetmap.org")
    user_agent: str = os.getenv("GEOCODER_USER_AGENT", "DogServicesDirectory/1.0")
    timeout: float = float(os.getenv("GEOCODER_TIMEOUT", "5.0"))


DEFAULT_GEOCODING_CONFIG = GeocodingConfig()
