from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from dog_search.app import app, get_cache, get_executor
from dog_search.search.cache import SearchCache
from dog_search.search.errors import StoreError
from dog_search.search.executor import SearchExecutor

client = TestClient(app)

FISHERS = {"lat": 39.9568, "lng": -86.0075, "city": "Fishers", "state": "IN", "zip": "46037"}


@pytest.fixture
def fresh_cache():
    cache = SearchCache()
    app.dependency_overrides[get_cache] = lambda: cache
    yield cache
    app.dependency_overrides.pop(get_cache, None)


@pytest.fixture
def broken_store():
    store = MagicMock()
    store.find.side_effect = StoreError("database offline")
    app.dependency_overrides[get_executor] = lambda: SearchExecutor(store)
    yield store
    app.dependency_overrides.pop(get_executor, None)


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ── Search ───────────────────────────────────────────────────────────────


class TestSearch:
    def test_dog_parks_near_me(self):
        resp = client.post("/search", json={"query": "dog parks near me", "user_location": FISHERS})
        assert resp.status_code == 200
        body = resp.json()
        assert body["strategy"] == "exact"
        assert body["processed_query"]["location"]["is_near_me"] is True
        assert body["metadata"]["search_radius"] == 10
        assert [r["id"] for r in body["results"]] == ["12", "11"]
        distances = [r["distance"] for r in body["results"]]
        assert distances == sorted(distances)

    def test_groomers_in_indianapolis_without_user_location(self):
        resp = client.post("/search", json={"query": "Groomers in Indianapolis"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["results"]
        assert all(r["service_type"] == "groomer" for r in body["results"])
        assert body["metadata"]["filters_applied"]["city"] == "Indianapolis"

    def test_product_search_has_no_distance(self):
        resp = client.post("/search", json={"query": "dog food", "user_location": FISHERS})
        assert resp.status_code == 200
        body = resp.json()
        assert any(r["id"] == "18" for r in body["results"])
        assert all(r["distance"] is None for r in body["results"])

    @pytest.mark.parametrize("query", ["dog toys", "chew toy", "toys"])
    def test_toy_searches_find_toy_products(self, query):
        resp = client.post("/search", json={"query": query, "user_location": FISHERS})
        assert resp.status_code == 200
        body = resp.json()
        assert body["strategy"] == "exact"
        assert "19" in [r["id"] for r in body["results"]]
        assert "size" not in body["metadata"]["filters_applied"]

    def test_entity_sets_serialize_sorted(self):
        resp = client.post("/search", json={"query": "vet groomer and dog park", "user_location": FISHERS})
        services = resp.json()["processed_query"]["entities"]["services"]
        assert services == sorted(services)
        assert len(services) >= 3

    def test_query_without_type_is_rejected(self):
        resp = client.post("/search", json={"query": "46220", "user_location": FISHERS})
        assert resp.status_code == 422

    def test_blank_query_is_rejected(self):
        resp = client.post("/search", json={"query": ""})
        assert resp.status_code == 422

    def test_invalid_user_location_is_rejected(self):
        bad = dict(FISHERS, lat=123.0)
        resp = client.post("/search", json={"query": "vet", "user_location": bad})
        assert resp.status_code == 422

    def test_store_outage_returns_empty_results(self, broken_store):
        resp = client.post("/search", json={"query": "vet near me", "user_location": FISHERS})
        assert resp.status_code == 200
        body = resp.json()
        assert body["results"] == []
        assert body["strategy"] is None
        assert len(body["attempts"]) == 3
        assert all(a["error"] == "database offline" for a in body["attempts"])


def test_parse_only():
    resp = client.post("/search/parse", json={"query": "46220"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is False
    assert body["processed_query"]["location"]["zip_code"] == "46220"


def test_suggestions():
    resp = client.get("/search/suggestions", params={"q": "groom"})
    assert resp.status_code == 200
    assert "groomer" in resp.json()["suggestions"]


def test_nearby_locations():
    resp = client.get("/locations/nearby", params={"lat": 39.9568, "lng": -86.0075, "radius": 10})
    assert resp.status_code == 200
    assert resp.json()["cities"][0]["name"] == "Fishers"


# ── Directory and cache ──────────────────────────────────────────────────


class TestDirectory:
    def test_listing_is_paged_and_cached(self, fresh_cache):
        params = {"service_type": "dog_park", "page": 1, "per_page": 2}

        first = client.get("/directory", params=params).json()
        assert first["total"] == 3
        assert first["total_pages"] == 2
        assert len(first["services"]) == 2
        assert first["cached"] is False

        second = client.get("/directory", params=params).json()
        assert second["cached"] is True
        assert second["services"] == first["services"]

        stats = client.get("/cache/stats").json()
        assert stats["hits"] == 1
        assert stats["size"] == 1

    def test_invalidate(self, fresh_cache):
        client.get("/directory", params={"service_type": "dog_park"})
        client.get("/directory", params={"service_type": "groomer"})

        resp = client.post("/cache/invalidate", json={"service_type": "dog_park"})
        assert resp.json() == {"status": "invalidated", "removed": 1}
        assert client.get("/cache/stats").json()["size"] == 1

    def test_store_outage_is_503(self, fresh_cache, broken_store):
        resp = client.get("/directory", params={"service_type": "groomer"})
        assert resp.status_code == 503
        assert fresh_cache.stats()["size"] == 0
