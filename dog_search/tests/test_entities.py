from __future__ import annotations

from dog_search.search.entities import (
    NEAR_ME,
    extract_entities,
    extract_filters,
    extract_locations,
    extract_modifiers,
)
from dog_search.search.normalizer import normalize_query


class TestExtractEntities:
    def test_groomers_in_indianapolis(self):
        entities = extract_entities(normalize_query("groomers in indianapolis"))
        assert entities.services == {"groomer"}
        assert entities.locations == {"indianapolis"}
        assert entities.products == set()

    def test_dog_parks_near_me(self):
        entities = extract_entities(normalize_query("dog parks near me"))
        assert entities.services == {"dog_park"}
        assert entities.products == set()
        assert entities.locations == {NEAR_ME}

    def test_emergency_vet_around_the_clock(self):
        entities = extract_entities(normalize_query("emergency vet 24/7"))
        assert entities.services == {"veterinarian"}
        assert entities.products == set()
        # Both availability patterns fire; emergency is checked last
        assert entities.filters["availability"] == "emergency"

    def test_zip_only_query(self):
        entities = extract_entities("46220")
        assert entities.locations == {"46220"}
        assert entities.services == set()

    def test_empty_query_yields_empty_entities(self):
        entities = extract_entities("")
        assert entities.services == set()
        assert entities.products == set()
        assert entities.locations == set()
        assert entities.filters == {}
        assert entities.modifiers == set()

    def test_products_detected(self):
        entities = extract_entities("organic dog food and rope toys")
        assert {"food", "toys"} <= entities.products
        assert entities.filters["organic"] is True

    def test_sets_have_no_duplicates(self):
        entities = extract_entities("vet vet vet clinic vet")
        assert sorted(entities.services) == sorted(set(entities.services))
        assert "veterinarian" in entities.services


class TestLocations:
    def test_state_name_is_detected(self):
        assert "OH" in extract_locations("dog trainers in ohio")

    def test_short_words_are_not_states(self):
        # "in" and "oh" are ordinary words, not state codes
        assert extract_locations("vet in carmel oh my") == {"carmel"}

    def test_city_alias(self):
        assert "indy" in extract_locations("groomers in indy")

    def test_near_me_variants(self):
        assert NEAR_ME in extract_locations("vet nearby")
        assert NEAR_ME in extract_locations("daycare in my area")


class TestFilters:
    def test_rating(self):
        assert extract_filters("4 star groomer")["min_rating"] == 4

    def test_around_the_clock_only(self):
        assert extract_filters("vet open 24 hours")["availability"] == "24_7"

    def test_mobile(self):
        assert extract_filters("groomer that will come to me")["mobile"] is True

    def test_premium_beats_budget(self):
        assert extract_filters("best cheap groomer")["quality"] == "premium"

    def test_budget(self):
        assert extract_filters("affordable daycare")["quality"] == "budget"

    def test_size_level(self):
        assert extract_filters("groomer for large dogs")["size"] == "large"
        assert extract_filters("tiny dog bed")["size"] == "small"

    def test_senior_and_puppy(self):
        filters = extract_filters("trainer for senior dogs and a puppy")
        assert filters["senior"] is True
        assert filters["puppy"] is True

    def test_no_filters(self):
        assert extract_filters("groomer") == {}


def test_modifiers():
    assert extract_modifiers("best friendly certified trainer") == {"best", "friendly", "certified"}


def test_entity_sets_serialize_sorted():
    entities = extract_entities("vet groomer dog park daycare")
    dumped = entities.model_dump(mode="json")
    assert dumped["services"] == sorted(entities.services)
    assert isinstance(dumped["locations"], list)
