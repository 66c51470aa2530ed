from __future__ import annotations

import pytest

from dog_search.search.normalizer import normalize_query


def test_lowercases_and_strips_punctuation():
    assert normalize_query("Dog-Parks   near ME!") == "dog parks near me"


def test_none_and_empty_become_empty_string():
    assert normalize_query(None) == ""
    assert normalize_query("") == ""
    assert normalize_query("   ") == ""


def test_slash_becomes_space():
    assert normalize_query("Emergency vet 24/7") == "emergency vet 24 7"


@pytest.mark.parametrize(
    "text",
    [
        "Groomers in Indianapolis",
        "  ...vet?? near,me  ",
        "4+ star trainers (puppy)",
        "",
    ],
)
def test_normalize_is_idempotent(text):
    once = normalize_query(text)
    assert normalize_query(once) == once
