from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "type",
    "service_type",
    "category",
    "description",
    "tags",
    "rating",
    "review_count",
    "price",
    "lat",
    "lng",
    "city",
    "state",
    "zip_code",
    "is_active",
    "in_stock",
    "is_mobile",
    "is_emergency",
    "is_24_hours",
]

_FLAG_COLUMNS: List[str] = ["is_active", "in_stock", "is_mobile", "is_emergency", "is_24_hours"]
_TRUE_VALUES = {"1", "true", "t", "yes", "y"}


def _normalize_rating(rating: float | int | str | None) -> float | None:
    if rating is None:
        return None
    raw = str(rating).strip()
    # Handle "X/5" format (e.g. "4.1/5")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None

    # Clamp to [0, 5]
    return max(0.0, min(5.0, value))


def _to_flag(value: object, default: bool) -> bool:
    if value is None or (isinstance(value, float) and value != value):
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _normalize_tags(value: object) -> str:
    if not isinstance(value, str):
        return ""
    # Exports use either commas or pipes between tags
    parts = value.replace("|", ",").split(",")
    return ",".join(p.strip().lower() for p in parts if p.strip())


def _normalize_zip(value: object) -> str:
    if value is None or (isinstance(value, float) and value != value):
        return ""
    raw = str(value).strip()
    if raw.endswith(".0"):
        raw = raw[:-2]
    return raw.zfill(5) if raw.isdigit() and len(raw) < 5 else raw


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the directory ingestion pipeline.

    Steps:
    - Read the raw listings export.
    - Map raw fields into the canonical listing schema.
    - Persist cleaned data as CSV for the search store.
    """

    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    df = pd.read_csv(config.raw_path, dtype=str)

    # Exports from the directory admin and older scrapes name columns differently.
    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in df.columns:
                return col
        return None

    def _column(candidates: List[str], default: object = "") -> pd.Series:
        col = _first_present(candidates)
        if col:
            return df[col]
        return pd.Series([default] * len(df), index=df.index, dtype=object)

    canonical = pd.DataFrame(index=df.index)
    id_col = _first_present(["id", "service_id", "listing_id"])
    canonical["id"] = df[id_col].fillna("").astype(str) if id_col else df.index.astype(str)
    blank_ids = canonical["id"].str.strip() == ""
    canonical.loc[blank_ids, "id"] = [f"temp-{i}" for i in df.index[blank_ids]]

    canonical["name"] = _column(["name", "business_name", "title"]).fillna("").astype(str).str.strip()
    canonical["type"] = (
        _column(["type", "listing_type"], "service").fillna("service").astype(str).str.lower()
    )
    canonical.loc[~canonical["type"].isin(["service", "product"]), "type"] = "service"
    canonical["service_type"] = (
        _column(["service_type", "serviceType"]).fillna("").astype(str).str.strip().str.lower()
    )
    canonical["category"] = _column(["category", "product_category"]).fillna("").astype(str).str.lower()
    canonical["description"] = _column(["description", "summary"]).fillna("").astype(str)
    canonical["tags"] = _column(["tags", "tag_names"]).apply(_normalize_tags)

    canonical["rating"] = _column(["rating", "avg_rating"], None).apply(_normalize_rating)
    canonical["review_count"] = (
        pd.to_numeric(_column(["review_count", "reviewCount", "reviews"], 0), errors="coerce")
        .fillna(0)
        .astype(int)
    )
    canonical["price"] = pd.to_numeric(_column(["price", "base_price"], None), errors="coerce")

    canonical["lat"] = pd.to_numeric(_column(["lat", "latitude"], None), errors="coerce")
    canonical["lng"] = pd.to_numeric(_column(["lng", "longitude", "lon"], None), errors="coerce")
    canonical["city"] = _column(["city"]).fillna("").astype(str).str.strip()
    canonical["state"] = _column(["state"]).fillna("").astype(str).str.strip().str.upper()
    canonical["zip_code"] = _column(["zip_code", "zip", "zipCode"], None).apply(_normalize_zip)

    for flag in _FLAG_COLUMNS:
        default = flag in ("is_active", "in_stock")
        canonical[flag] = _column([flag], None).apply(lambda v, d=default: _to_flag(v, d))

    # A listing without a name is not searchable
    before = len(canonical)
    canonical = canonical.loc[canonical["name"] != ""]
    dropped = before - len(canonical)
    if dropped:
        logger.warning("Dropped %d listings without a name", dropped)

    canonical = canonical[CANONICAL_COLUMNS]

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    logger.info("Wrote %d listings to %s", len(canonical), output_path)
    return output_path


if __name__ == "__main__":
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")
