from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


class EmptyLocationPolicy(str, Enum):
    """What to do when a query names no location at all."""

    user_location = "user_location"
    no_filter = "no_filter"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class SearchConfig:
    default_radius: float = 50.0
    near_me_radius: float = 10.0
    max_radius: float = 100.0
    expansion_factor: float = 1.5
    max_attempts: int = 3
    page_size: int = int(os.getenv("SEARCH_PAGE_SIZE", "20"))
    empty_location_policy: EmptyLocationPolicy = EmptyLocationPolicy(
        os.getenv("SEARCH_EMPTY_LOCATION_POLICY", EmptyLocationPolicy.no_filter.value)
    )
    region: str = os.getenv("SEARCH_REGION", "IN")
    match_locality: bool = _env_bool("SEARCH_MATCH_LOCALITY")
    cache_ttl_seconds: float = float(os.getenv("SEARCH_CACHE_TTL", "300"))
    cache_max_size: int = int(os.getenv("SEARCH_CACHE_MAX_SIZE", "1000"))
    # Used for processing when the client sends no coordinates (Fishers, IN)
    default_lat: float = 39.9568
    default_lng: float = -86.0075
    default_city: str = "Fishers"
    default_state: str = "IN"
    default_zip: str = "46037"


DEFAULT_SEARCH_CONFIG = SearchConfig()
