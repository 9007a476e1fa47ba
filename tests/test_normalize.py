"""Tests for query normalization and the search key."""

import pytest

from obit_finder.tools.normalize import (
    InvalidQueryError,
    city_key,
    generate_search_key,
    normalize_name,
    normalize_query,
    normalize_state,
    validate_query,
)


class TestNormalizeName:
    def test_title_cases_and_trims(self):
        assert normalize_name("  wILLiam  ") == "William"

    def test_keeps_apostrophes_and_hyphens(self):
        assert normalize_name("o'brien") == "O'Brien"
        assert normalize_name("mary-jane") == "Mary-Jane"

    def test_strips_punctuation(self):
        assert normalize_name("smith!") == "Smith"

    def test_blank_input(self):
        assert normalize_name(None) == ""
        assert normalize_name("   ") == ""


class TestNormalizeState:
    @pytest.mark.parametrize("raw", ["oh", "OH", "Ohio", " ohio ", "Oh."])
    def test_ohio_variants(self, raw):
        assert normalize_state(raw) == "OH"

    def test_multi_word_state(self):
        assert normalize_state("new york") == "NY"

    def test_unknown_value_passes_through(self):
        assert normalize_state("  Ontario ") == "Ontario"


class TestCityKey:
    def test_saint_abbreviation(self):
        assert city_key("St. Louis") == city_key("Saint Louis") == "saint louis"

    def test_fort_and_mount(self):
        assert city_key("Ft Wayne") == "fort wayne"
        assert city_key("Mt. Vernon") == "mount vernon"

    def test_single_word_not_expanded(self):
        assert city_key("St") == "st"


class TestSearchKey:
    def test_stable_across_field_order_and_casing(self):
        q1 = {"first_name": "bill", "last_name": "SMITH", "city": "columbus", "state": "oh", "age": 80}
        q2 = {"age": "80", "state": "Ohio", "city": "Columbus", "last_name": "Smith", "first_name": "Bill"}
        assert normalize_query(q1)["search_key"] == normalize_query(q2)["search_key"]

    def test_is_16_hex_chars(self):
        key = generate_search_key("Smith", "John")
        assert len(key) == 16
        int(key, 16)

    def test_differs_by_city(self):
        assert generate_search_key("Smith", "John", "Columbus") != generate_search_key("Smith", "John", "Dayton")


class TestValidateQuery:
    def test_requires_last_name(self):
        with pytest.raises(InvalidQueryError):
            validate_query({"first_name": "John"})

    def test_requires_first_name_or_nickname(self):
        with pytest.raises(InvalidQueryError):
            validate_query({"last_name": "Smith", "first_name": "  "})

    def test_nickname_alone_is_enough(self):
        validate_query({"last_name": "Smith", "nickname": "Bill"})


class TestNormalizeQuery:
    def test_nickname_fills_first_name(self):
        nq = normalize_query({"last_name": "Smith", "nickname": "bill"})
        assert nq["normalized_first_name"] == "Bill"
        assert "william" in nq["first_name_variants"]

    def test_variants_include_nickname_group(self):
        nq = normalize_query({"first_name": "Robert", "last_name": "Jones", "nickname": "Butch"})
        assert {"robert", "bob", "butch"} <= nq["first_name_variants"]

    def test_bad_age_degrades_to_none(self):
        nq = normalize_query({"first_name": "John", "last_name": "Smith", "age": "abc"})
        assert nq["age"] is None

    @pytest.mark.parametrize("age", [80.0, "80.0", " 80 "])
    def test_integral_age_forms_share_search_key(self, age):
        base = normalize_query({"first_name": "John", "last_name": "Smith", "age": 80})
        nq = normalize_query({"first_name": "John", "last_name": "Smith", "age": age})
        assert nq["age"] == 80
        assert nq["search_key"] == base["search_key"]

    @pytest.mark.parametrize("age", [80.5, "nan", float("inf"), 0, -3])
    def test_unusable_age_degrades_to_none(self, age):
        nq = normalize_query({"first_name": "John", "last_name": "Smith", "age": age})
        assert nq["age"] is None

    def test_keywords_split_and_lowered(self):
        nq = normalize_query({"first_name": "John", "last_name": "Smith", "keywords": "Veteran, nurse,"})
        assert nq["normalized_keywords"] == ["veteran", "nurse"]

    def test_does_not_mutate_input(self):
        query = {"first_name": " bill ", "last_name": "smith", "state": "Ohio"}
        snapshot = dict(query)
        normalize_query(query)
        assert query == snapshot
