"""Tests for age, date-of-death, service-date and location extraction."""

import datetime

import pytest

from obit_finder.tools.text_extract import (
    extract_age,
    extract_dod,
    extract_location,
    extract_service_dates,
    format_date,
    infer_year_from_dod,
)

TODAY = datetime.date(2026, 1, 10)


class TestExtractAge:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("John Smith, 81, of Columbus", 81),
            ("died at age 71 after a long illness", 71),
            ("Mary Jones, aged 102", 102),
            ("He was 67 years old", 67),
        ],
    )
    def test_patterns(self, text, expected):
        assert extract_age(text) == expected

    def test_implausible_age_rejected(self):
        assert extract_age("age 200") is None

    def test_no_age(self):
        assert extract_age("no numbers here") is None
        assert extract_age(None) is None


class TestFormatDate:
    def test_month_name(self):
        assert format_date("2024", "March", "3", TODAY) == "2024-03-03"

    def test_two_digit_year(self):
        assert format_date("99", "12", "31", TODAY) == "1999-12-31"
        assert format_date("24", "1", "2", TODAY) == "2024-01-02"

    def test_impossible_date(self):
        assert format_date("2024", "February", "30", TODAY) is None

    def test_future_date_rejected(self):
        assert format_date("2026", "1", "11", TODAY) == "2026-01-11"
        assert format_date("2026", "1", "12", TODAY) is None


class TestExtractDod:
    def test_death_phrase_with_weekday(self):
        text = "John passed away on Monday, December 29, 2025 at home."
        assert extract_dod(text, TODAY) == "2025-12-29"

    def test_numeric_date(self):
        assert extract_dod("Mary died 3/15/2024 in Dayton", TODAY) == "2024-03-15"

    def test_day_first_with_ordinal(self):
        assert extract_dod("He passed away on the 5th of March, 2024", TODAY) == "2024-03-05"

    def test_birth_death_range_uses_second_date(self):
        assert extract_dod("John Doe January 5, 1940 - March 3, 2024", TODAY) == "2024-03-03"

    def test_bare_year_range(self):
        assert extract_dod("Margaret Jones (1939 - 2023)", TODAY) == "2023-01-01"

    def test_impossible_date_yields_none(self):
        assert extract_dod("He died February 30, 2024", TODAY) is None

    def test_future_date_yields_none(self):
        assert extract_dod("He died March 3, 2030", TODAY) is None

    def test_empty(self):
        assert extract_dod("", TODAY) is None


class TestServiceDates:
    def test_partial_and_full_dates(self):
        text = (
            "Visitation will be held March 7 at Schoedinger. "
            "Funeral services will be held on Friday, March 8, 2024."
        )
        assert extract_service_dates(text, dod="2024-03-03") == {
            "visitation": "2024-03-07",
            "funeral": "2024-03-08",
        }

    def test_year_rolls_over_after_december_death(self):
        text = "Funeral service January 3 at St. Mary Church."
        assert extract_service_dates(text, dod="2023-12-29")["funeral"] == "2024-01-03"

    def test_partial_date_without_dod_is_dropped(self):
        assert extract_service_dates("Visitation March 7 at the church.") == {
            "visitation": None,
            "funeral": None,
        }

    def test_infer_year_invalid_day(self):
        assert infer_year_from_dod("Feb", "30", "2024-01-01") is None
        assert infer_year_from_dod("March", "7", None) is None


class TestExtractLocation:
    def test_city_and_code(self):
        text = "William Smith, 81, of Columbus, OH passed away"
        assert extract_location(text) == {"city": "Columbus", "state": "OH"}

    def test_saint_prefix(self):
        assert extract_location("of St. Louis, MO") == {"city": "St. Louis", "state": "MO"}

    def test_skips_non_state_codes(self):
        text = "Smith, XY and lived in Dayton, OH"
        assert extract_location(text) == {"city": "Dayton", "state": "OH"}

    def test_full_state_name(self):
        assert extract_location("She lived in Toledo, Ohio for years") == {"city": "Toledo", "state": "OH"}

    def test_nothing_found(self):
        assert extract_location("no place here") == {"city": None, "state": None}

    def test_city_is_at_most_two_words(self):
        text = "Services for John Smith Columbus, OH were held"
        assert extract_location(text)["city"] == "Smith Columbus"

    def test_name_words_peeled_off_city(self):
        text = "Services for John Smith Columbus, OH were held"
        assert extract_location(text, "John Smith") == {"city": "Columbus", "state": "OH"}

    def test_two_word_city_kept(self):
        assert extract_location("Mary Jones of Grand Rapids, MI", "Mary Jones") == {
            "city": "Grand Rapids",
            "state": "MI",
        }

    def test_city_matching_name_word_survives_alone(self):
        assert extract_location("Jackson, MS", "Andrew Jackson") == {"city": "Jackson", "state": "MS"}
