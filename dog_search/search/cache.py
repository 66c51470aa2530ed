from __future__ import annotations

import logging
import threading
import time
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULT_TTL = 300  # 5 minutes
_DEFAULT_MAX_SIZE = 1000
_DEFAULT_CLEANUP_INTERVAL = 60

# Key layout: (kind, service_type, state, zip_code, page, per_page)
CacheKey = tuple[str, str, str, str, int, int]


def _page_key(service_type: str | None, state: str | None, zip_code: str | None, page: int, per_page: int) -> CacheKey:
    return ("page", service_type or "", state or "", zip_code or "", page, per_page)


def _all_key(service_type: str | None, state: str | None, zip_code: str | None) -> CacheKey:
    return ("all", service_type or "", state or "", zip_code or "", 0, 0)


class SearchCache:
    """TTL cache for directory listings.

    Entries are evicted oldest-inserted first once ``max_size`` is reached
    (re-setting a key keeps its original position). All access goes through
    one lock; ``start()`` launches a daemon thread that purges expired entries.
    """

    def __init__(
        self,
        ttl_seconds: float = _DEFAULT_TTL,
        max_size: int = _DEFAULT_MAX_SIZE,
        cleanup_interval: float = _DEFAULT_CLEANUP_INTERVAL,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._cleanup_interval = cleanup_interval
        self._entries: dict[CacheKey, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # ── Raw access ──────────────────────────────────────────────────────

    def get(self, key: CacheKey) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry and time.time() - entry["created_at"] <= entry["ttl"]:
                self._hits += 1
                return entry["value"]
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, key: CacheKey, value: Any, ttl: float | None = None) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = {
                "value": value,
                "created_at": time.time(),
                "ttl": self._ttl if ttl is None else ttl,
            }

    # ── Directory listings ──────────────────────────────────────────────

    def get_page(self, service_type: str | None, state: str | None, zip_code: str | None, page: int, per_page: int) -> Any | None:
        return self.get(_page_key(service_type, state, zip_code, page, per_page))

    def set_page(self, service_type: str | None, state: str | None, zip_code: str | None, page: int, per_page: int, value: Any) -> None:
        self.set(_page_key(service_type, state, zip_code, page, per_page), value)

    def get_all(self, service_type: str | None, state: str | None, zip_code: str | None) -> Any | None:
        return self.get(_all_key(service_type, state, zip_code))

    def set_all(self, service_type: str | None, state: str | None, zip_code: str | None, value: Any) -> None:
        self.set(_all_key(service_type, state, zip_code), value)

    def invalidate(
        self,
        service_type: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
    ) -> int:
        """Drop every entry matching all supplied fields; returns how many."""
        with self._lock:
            doomed = [
                key
                for key in self._entries
                if (not service_type or key[1] == service_type)
                and (not state or key[2] == state)
                and (not zip_code or key[3] == zip_code)
            ]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.info("Invalidated %d cache entries", len(doomed))
        return len(doomed)

    # ── Housekeeping ────────────────────────────────────────────────────

    def purge_expired(self) -> int:
        now = time.time()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now - e["created_at"] > e["ttl"]]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def _run_cleanup(self) -> None:
        while not self._stop.wait(self._cleanup_interval):
            removed = self.purge_expired()
            if removed:
                logger.debug("Purged %d expired cache entries", removed)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_cleanup, name="search-cache-cleanup", daemon=True)
        self._thread.start()

    def close(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None
        self.clear()
