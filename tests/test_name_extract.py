"""Tests for name extraction from titles, snippets and URLs."""

import pytest

from obit_finder.tools.name_extract import (
    clean_title,
    extract_name,
    extract_name_from_snippet,
    extract_name_from_title,
    extract_name_from_url,
    is_generic_title,
    is_valid_name,
)


class TestCleanTitle:
    def test_strips_site_and_location(self):
        assert clean_title("John A. Smith Obituary - Columbus, OH | Legacy.com") == "John A. Smith"

    def test_strips_trailing_full_state_location(self):
        assert clean_title("Patricia Pierce Rochester, New York") == "Patricia Pierce"

    def test_strips_age_suffix(self):
        assert clean_title("Bill Smith, 80 - Dayton, OH - Obituary") == "Bill Smith"


class TestExtractNameFromTitle:
    def test_first_middle_last(self):
        name = extract_name_from_title("John A. Smith Obituary - Columbus, OH | Legacy.com")
        assert name["first_name"] == "John"
        assert name["middle_name"] == "A"
        assert name["last_name"] == "Smith"

    def test_last_comma_first(self):
        name = extract_name_from_title("Smith, John Robert - Columbus Dispatch")
        assert name == {
            "full_name": "John Robert Smith",
            "first_name": "John",
            "middle_name": "Robert",
            "last_name": "Smith",
        }

    def test_hyphenated_last_name_survives(self):
        name = extract_name_from_title("Maria Gonzalez-Irizarry Obituary - Miami, FL")
        assert name["last_name"] == "Gonzalez-Irizarry"

    def test_generational_suffix_dropped_from_parts(self):
        name = extract_name_from_title("Robert Jones Jr. Obituary")
        assert name["first_name"] == "Robert"
        assert name["last_name"] == "Jones"
        assert name["full_name"] == "Robert Jones Jr."

    def test_listing_page_has_no_parts(self):
        name = extract_name_from_title("Recent Obituaries | Schoedinger Funeral Home")
        assert name == {"full_name": "Recent Obituaries"}

    def test_empty_title(self):
        assert extract_name_from_title("") == {"full_name": None}


class TestExtractNameFromSnippet:
    def test_newspaper_style_uppercase_last_name(self):
        name = extract_name_from_snippet("SMITH, John - Age 81, of Columbus", "Smith")
        assert name["first_name"] == "John"
        assert name["last_name"] == "Smith"

    def test_city_after_last_name_is_not_a_first_name(self):
        name = extract_name_from_snippet("Services for John Smith, Columbus", "Smith")
        assert name["first_name"] == "John"
        assert name["last_name"] == "Smith"

    def test_passed_away_pattern(self):
        name = extract_name_from_snippet("John Smith passed away on March 3, 2024")
        assert name["full_name"] == "John Smith"

    def test_leading_words_trimmed(self):
        name = extract_name_from_snippet("On Monday John Smith died at home")
        assert name["first_name"] == "John"
        assert name["last_name"] == "Smith"

    def test_nothing_found(self):
        assert extract_name_from_snippet("Browse recent obituaries.", "Jones") == {"full_name": None}


class TestExtractNameFromUrl:
    def test_slug(self):
        name = extract_name_from_url("https://www.daytondailynews.com/obituaries/bill-smith")
        assert name["first_name"] == "Bill"
        assert name["last_name"] == "Smith"

    def test_non_obituary_path(self):
        assert extract_name_from_url("https://example.com/about/bill-smith") == {"full_name": None}


class TestExtractNameChain:
    def test_falls_back_to_url(self):
        name = extract_name(
            "Recent Obituaries | Example Funeral Home",
            "Browse recent obituaries.",
            "https://example.com/obituary/mary-jones",
            "Jones",
        )
        assert name["first_name"] == "Mary"
        assert name["last_name"] == "Jones"

    def test_title_wins_when_valid(self):
        name = extract_name(
            "William Smith Obituary - Columbus, OH",
            "Bill Jones passed away",
            "https://example.com/obituary/mary-jones",
        )
        assert name["first_name"] == "William"


class TestValidity:
    @pytest.mark.parametrize("title", ["Recent Obituaries", "Search for obituaries", "Obituaries", "x"])
    def test_generic_titles(self, title):
        assert is_generic_title(title)

    def test_person_title_not_generic(self):
        assert not is_generic_title("John Smith")

    def test_placeholder_last_name_invalid(self):
        assert not is_valid_name("Funeral", "Home")
        assert not is_valid_name("John", "Obituary")
        assert is_valid_name("John", "O'Brien")
