from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from .errors import StoreError
from .predicates import And, Contains, Equals, In, Or, Predicate, Range, StoreQuery

logger = logging.getLogger(__name__)

_PROCESSED_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"
_PROCESSED_CSV = _PROCESSED_DIR / "services.csv"

LIST_COLUMNS = frozenset({"tags"})
BOOL_COLUMNS = ("is_active", "in_stock", "is_mobile", "is_emergency", "is_24_hours")


class SearchStore(Protocol):
    def find(self, query: StoreQuery) -> list[dict[str, Any]]: ...

    def count(self, where: Predicate) -> int: ...

    def suggest(self, text: str, limit: int = 10) -> list[str]: ...


def _split_tags(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(t).strip().lower() for t in value if str(t).strip()]
    if not isinstance(value, str):
        return []
    return [t.strip().lower() for t in value.split(",") if t.strip()]


def prepare_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Parse tags into lists and coerce flag columns to bool."""
    df = df.copy()
    if "tags" in df.columns:
        df["tags"] = df["tags"].apply(_split_tags)
    else:
        df["tags"] = [[] for _ in range(len(df))]
    for column in BOOL_COLUMNS:
        if column in df.columns:
            df[column] = df[column].fillna(False).astype(bool)
    if "id" in df.columns:
        df["id"] = df["id"].astype(str)
    return df


def _load(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={"id": str, "zip_code": str})
    return prepare_frame(df)


# ---------------------------------------------------------------------------
# Predicate evaluation
# ---------------------------------------------------------------------------


def _lowered(col: pd.Series) -> pd.Series:
    return col.fillna("").astype(str).str.lower()


def _scalar_eq(col: pd.Series, value: Any, ignore_case: bool) -> pd.Series:
    if isinstance(value, str):
        if ignore_case:
            return col.notna() & _lowered(col).eq(value.lower())
        return col.notna() & col.astype(str).eq(value)
    return col.eq(value)


def evaluate(predicate: Predicate, df: pd.DataFrame) -> pd.Series:
    """Boolean mask of the rows of ``df`` matching ``predicate``."""
    if isinstance(predicate, And):
        mask = pd.Series(True, index=df.index)
        for clause in predicate.clauses:
            mask &= evaluate(clause, df)
        return mask

    if isinstance(predicate, Or):
        mask = pd.Series(False, index=df.index)
        for clause in predicate.clauses:
            mask |= evaluate(clause, df)
        return mask

    if predicate.field not in df.columns:
        return pd.Series(False, index=df.index)
    col = df[predicate.field]

    if isinstance(predicate, Equals):
        return _scalar_eq(col, predicate.value, predicate.ignore_case)

    if isinstance(predicate, Contains):
        needle = predicate.value.lower()
        if predicate.field in LIST_COLUMNS:
            return col.apply(
                lambda items: isinstance(items, list) and any(needle in str(i).lower() for i in items)
            ).astype(bool)
        return col.notna() & _lowered(col).str.contains(needle, regex=False)

    if isinstance(predicate, Range):
        numbers = pd.to_numeric(col, errors="coerce")
        mask = numbers.notna()
        if predicate.gte is not None:
            mask &= numbers >= predicate.gte
        if predicate.lte is not None:
            mask &= numbers <= predicate.lte
        return mask

    if isinstance(predicate, In):
        mask = pd.Series(False, index=df.index)
        for value in predicate.values:
            mask |= _scalar_eq(col, value, ignore_case=True)
        return mask

    raise StoreError(f"Unsupported predicate: {predicate!r}")


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    cleaned = df.astype(object).where(df.notna(), None)
    return cleaned.to_dict(orient="records")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class DataFrameStore:
    """In-memory directory store over a pandas DataFrame."""

    def __init__(self, df: pd.DataFrame | None = None, path: Path = _PROCESSED_CSV) -> None:
        self._df = prepare_frame(df) if df is not None else None
        self._path = path

    @property
    def dataframe(self) -> pd.DataFrame:
        if self._df is None:
            try:
                self._df = _load(self._path)
            except (OSError, ValueError) as exc:
                raise StoreError(f"Could not load directory data from {self._path}") from exc
            logger.info("Loaded %d directory rows from %s", len(self._df), self._path)
        return self._df

    def _filtered(self, where: Predicate) -> pd.DataFrame:
        df = self.dataframe
        try:
            return df.loc[evaluate(where, df)]
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            raise StoreError(f"Predicate evaluation failed: {exc}") from exc

    def find(self, query: StoreQuery) -> list[dict[str, Any]]:
        rows = self._filtered(query.where)
        keys = [k for k in query.order_by if k.field in rows.columns]
        if keys and not rows.empty:
            rows = rows.sort_values(
                by=[k.field for k in keys],
                ascending=[not k.descending for k in keys],
                na_position="last",
                kind="mergesort",
            )
        page = rows.iloc[query.offset : query.offset + query.limit]
        return _records(page)

    def count(self, where: Predicate) -> int:
        return int(len(self._filtered(where)))

    def suggest(self, text: str, limit: int = 10) -> list[str]:
        needle = (text or "").strip().lower()
        if not needle:
            return []
        df = self.dataframe
        found: list[str] = []
        for column in ("name", "service_type"):
            if column not in df.columns:
                continue
            matches = df.loc[_lowered(df[column]).str.contains(needle, regex=False), column]
            for value in matches.dropna().astype(str):
                if value not in found:
                    found.append(value)
        return found[:limit]


_store: DataFrameStore | None = None


def get_store() -> DataFrameStore:
    """Return the process-wide store over the processed CSV, created on first call."""
    global _store
    if _store is None:
        _store = DataFrameStore()
    return _store
