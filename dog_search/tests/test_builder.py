from __future__ import annotations

import pytest

from dog_search.search.builder import (
    build_directory_query,
    build_query,
    filter_clauses,
    location_clauses,
    order_for,
)
from dog_search.search.models import (
    ExtractedEntities,
    MatchStrategy,
    ProcessedQuery,
    ResolvedLocation,
)
from dog_search.search.predicates import And, Contains, Equals, Or, Range, StoreQuery


def _query(**overrides) -> ProcessedQuery:
    fields = dict(
        original_query="groomers in carmel",
        normalized_query="groomers in carmel",
        search_type="service",
        entities=ExtractedEntities(services={"groomer"}, locations={"carmel"}),
        location=ResolvedLocation(lat=39.9784, lng=-86.118, radius=10, city="Carmel", state="IN"),
    )
    fields.update(overrides)
    return ProcessedQuery(**fields)


class TestStrategies:
    def test_exact_matches_type_or_whole_name(self):
        store_query = build_query(_query(), MatchStrategy.exact)
        match = store_query.where.clauses[0]
        assert isinstance(match, Or)
        assert Equals(field="service_type", value="groomer") in match.clauses
        assert Contains(field="name", value="groomers in carmel") in match.clauses

    def test_fuzzy_matches_significant_words(self):
        match = build_query(_query(), MatchStrategy.fuzzy).where.clauses[0]
        assert Contains(field="name", value="groomers") in match.clauses
        assert Contains(field="description", value="carmel") in match.clauses
        # "in" is too short to be useful
        assert Contains(field="name", value="in") not in match.clauses

    def test_broad_requires_active_listing(self):
        store_query = build_query(_query(), MatchStrategy.broad)
        assert store_query.where.clauses[0] == Equals(field="is_active", value=True)

    def test_broad_product_search_requires_stock(self):
        query = _query(
            search_type="product",
            entities=ExtractedEntities(products={"toys"}),
            location=None,
        )
        store_query = build_query(query, MatchStrategy.broad)
        assert store_query.where.clauses[0] == Equals(field="in_stock", value=True)
        assert Contains(field="category", value="toys") in store_query.where.clauses[1].clauses

    def test_strategy_accepts_plain_string(self):
        assert build_query(_query(), "fuzzy") == build_query(_query(), MatchStrategy.fuzzy)

    def test_no_location_means_no_bounding_box(self):
        store_query = build_query(_query(location=None))
        assert not any(isinstance(c, Range) for c in store_query.where.clauses)
        assert store_query.sort_by_distance is False


class TestFilters:
    def test_rating_becomes_range(self):
        assert filter_clauses({"rating": 4}) == [Range(field="rating", gte=4.0)]

    def test_availability(self):
        assert filter_clauses({"availability": "24_7"}) == [Equals(field="is_24_hours", value=True)]
        assert filter_clauses({"availability": "emergency"}) == [Equals(field="is_emergency", value=True)]

    def test_mobile(self):
        assert filter_clauses({"mobile": True}) == [Equals(field="is_mobile", value=True)]

    def test_size_checks_tags_or_description(self):
        assert filter_clauses({"size": "large"}) == [
            Or(clauses=[
                Contains(field="tags", value="large"),
                Contains(field="description", value="large"),
            ])
        ]

    def test_any_size_adds_nothing(self):
        assert filter_clauses({"size": "any"}) == []

    def test_organic_checks_tags_or_description(self):
        (clause,) = filter_clauses({"organic": True})
        assert isinstance(clause, Or)
        assert Contains(field="tags", value="organic") in clause.clauses

    def test_location_fields_are_not_filters(self):
        assert filter_clauses({"city": "Carmel", "state": "IN", "zip_code": "46032"}) == []


class TestLocationClauses:
    def test_bounding_box(self):
        location = ResolvedLocation(lat=0.0001, lng=10.0, radius=69)
        lat_range, lng_range = location_clauses(location)
        assert lat_range.gte == pytest.approx(-0.9999)
        assert lat_range.lte == pytest.approx(1.0001)
        assert lng_range.gte == pytest.approx(9.0, abs=1e-3)
        assert lng_range.lte == pytest.approx(11.0, abs=1e-3)

    def test_locality_only_when_enabled(self):
        location = ResolvedLocation(lat=39.9, lng=-86.1, radius=10, city="Carmel", state="IN")
        assert len(location_clauses(location)) == 2
        clauses = location_clauses(location, match_locality=True)
        assert Equals(field="city", value="Carmel") in clauses
        assert Equals(field="state", value="IN") in clauses

    def test_near_me_skips_locality(self):
        location = ResolvedLocation(lat=39.9, lng=-86.1, radius=10, city="Fishers", is_near_me=True)
        assert len(location_clauses(location, match_locality=True)) == 2


def test_order_for_quality():
    assert [k.field for k in order_for({"quality": "premium"})] == ["rating", "review_count", "price"]
    budget = order_for({"quality": "budget"})
    assert budget[0].field == "price" and budget[0].descending is False
    assert [k.field for k in order_for({})] == ["rating", "review_count"]


def test_store_query_survives_json():
    store_query = build_query(_query(filters={"rating": 4, "mobile": True}), MatchStrategy.broad)
    restored = StoreQuery.model_validate_json(store_query.model_dump_json())
    assert restored == store_query


def test_directory_query_paging():
    store_query = build_directory_query("dog_park", "IN", None, page=3, per_page=10)
    assert store_query.offset == 20
    assert store_query.limit == 10
    assert isinstance(store_query.where, And)
    assert len(store_query.where.clauses) == 2
