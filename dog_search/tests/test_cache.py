from __future__ import annotations

from unittest.mock import patch

from dog_search.search.cache import SearchCache


class TestExpiry:
    @patch("dog_search.search.cache.time")
    def test_entry_expires_after_ttl(self, mock_time):
        mock_time.time.return_value = 1000.0
        cache = SearchCache(ttl_seconds=60)
        cache.set_page("groomer", "IN", None, 1, 20, ["a"])

        mock_time.time.return_value = 1059.0
        assert cache.get_page("groomer", "IN", None, 1, 20) == ["a"]

        mock_time.time.return_value = 1061.0
        assert cache.get_page("groomer", "IN", None, 1, 20) is None
        assert cache.stats()["size"] == 0

    @patch("dog_search.search.cache.time")
    def test_purge_expired(self, mock_time):
        mock_time.time.return_value = 1000.0
        cache = SearchCache(ttl_seconds=60)
        cache.set_all("groomer", None, None, ["a"])
        cache.set(("page", "vet", "", "", 1, 20), ["b"], ttl=600)

        mock_time.time.return_value = 1100.0
        assert cache.purge_expired() == 1
        assert cache.get(("page", "vet", "", "", 1, 20)) == ["b"]


class TestEviction:
    def test_oldest_inserted_is_evicted(self):
        cache = SearchCache(max_size=2)
        cache.set_all("a", None, None, 1)
        cache.set_all("b", None, None, 2)
        cache.set_all("c", None, None, 3)
        assert cache.get_all("a", None, None) is None
        assert cache.get_all("b", None, None) == 2
        assert cache.get_all("c", None, None) == 3

    def test_resetting_key_keeps_its_position(self):
        cache = SearchCache(max_size=2)
        cache.set_all("a", None, None, 1)
        cache.set_all("b", None, None, 2)
        cache.set_all("a", None, None, 10)
        cache.set_all("c", None, None, 3)
        assert cache.get_all("a", None, None) is None
        assert cache.get_all("b", None, None) == 2


class TestInvalidate:
    def _filled(self) -> SearchCache:
        cache = SearchCache()
        cache.set_page("groomer", "IN", None, 1, 20, "p1")
        cache.set_page("groomer", "IN", None, 2, 20, "p2")
        cache.set_page("veterinarian", "IN", "46220", 1, 20, "v1")
        cache.set_all("groomer", "KY", None, "all")
        return cache

    def test_by_service_type(self):
        cache = self._filled()
        assert cache.invalidate(service_type="groomer") == 3
        assert cache.get_page("veterinarian", "IN", "46220", 1, 20) == "v1"

    def test_by_several_fields(self):
        cache = self._filled()
        assert cache.invalidate(service_type="groomer", state="KY") == 1
        assert cache.get_page("groomer", "IN", None, 1, 20) == "p1"

    def test_by_zip(self):
        cache = self._filled()
        assert cache.invalidate(zip_code="46220") == 1

    def test_no_fields_clears_everything(self):
        cache = self._filled()
        assert cache.invalidate() == 4
        assert cache.stats()["size"] == 0


def test_stats_hit_rate():
    cache = SearchCache()
    cache.set_page("groomer", None, None, 1, 20, "x")
    cache.get_page("groomer", None, None, 1, 20)
    cache.get_page("groomer", None, None, 1, 20)
    cache.get_page("groomer", None, None, 2, 20)
    cache.get_page("groomer", None, None, 3, 20)
    stats = cache.stats()
    assert stats["hits"] == 2
    assert stats["misses"] == 2
    assert stats["hit_rate"] == 50.0
    assert stats["max_size"] == 1000


def test_start_and_close():
    cache = SearchCache(cleanup_interval=0.01)
    cache.start()
    cache.set_all("groomer", None, None, "x")
    cache.close()
    assert cache.stats() == {"size": 0, "max_size": 1000, "hits": 0, "misses": 0, "hit_rate": 0.0}
