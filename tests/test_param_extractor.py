"""Tests for flight parameter extraction and date normalization."""

import pytest

from flightmate.llm.param_extractor import (
    FlightParamExtractor,
    extract_flight_params,
    extract_partial_flight_params,
    has_date_mention,
    looks_like_date,
    normalize_date,
)
from flightmate.utils.airports import find_city_mentions, lookup_airport

from conftest import TODAY


# ============================================
# normalize_date
# ============================================


class TestNormalizeDate:
    @pytest.mark.parametrize("raw", ["2025-10-18", "2024-01-05", "2030-12-31"])
    def test_iso_input_returned_unchanged(self, raw):
        # past ISO dates are not rolled forward
        assert normalize_date(raw, TODAY) == raw

    @pytest.mark.parametrize("raw", ["18/10", "15/03", "10/18/2025", "18-10-25", "2025/10/18"])
    def test_normalizing_twice_changes_nothing(self, raw):
        once = normalize_date(raw, TODAY)
        assert once is not None
        assert normalize_date(once, TODAY) == once

    def test_two_part_date_in_current_year(self):
        assert normalize_date("18/10", TODAY) == "2025-10-18"

    def test_two_part_date_already_past_rolls_to_next_year(self):
        assert normalize_date("15/03", TODAY) == "2026-03-15"

    def test_part_above_twelve_is_the_day(self):
        assert normalize_date("10/18/2025", TODAY) == "2025-10-18"

    def test_two_digit_year(self):
        assert normalize_date("18-10-25", TODAY) == "2025-10-18"

    def test_explicit_past_year_is_kept(self):
        assert normalize_date("05/01/2024", TODAY) == "2024-01-05"

    @pytest.mark.parametrize("raw", ["31/02", "2025-02-30", "45/45", "", "abc"])
    def test_impossible_dates_return_none(self, raw):
        assert normalize_date(raw, TODAY) is None


class TestDateMentions:
    def test_looks_like_date(self):
        assert looks_like_date("leaving on 18/10")
        assert looks_like_date("Oct 18 works")
        assert looks_like_date("tomorrow morning")
        assert not looks_like_date("sometime soon")

    def test_bare_month_counts_as_mention(self):
        assert has_date_mention("sometime in December")
        assert not looks_like_date("sometime in December")


# ============================================
# Airport lookup
# ============================================


class TestAirportLookup:
    def test_exact_city(self):
        assert lookup_airport("Mumbai") == "BOM"

    def test_known_code(self):
        assert lookup_airport("jfk") == "JFK"

    def test_longest_contained_city_wins(self):
        assert lookup_airport("new delhi airport") == "DEL"

    def test_prefix_match(self):
        assert lookup_airport("singap") == "SIN"

    @pytest.mark.parametrize(
        "phrase, code",
        [("york", "JFK"), ("vegas", "LAS"), ("lumpur", "KUL"), ("francisco", "SFO")],
    )
    def test_phrase_inside_a_city_name(self, phrase, code):
        assert lookup_airport(phrase) == code

    def test_short_words_never_match_inside_names(self):
        assert lookup_airport("to") is None
        assert lookup_airport("an") is None

    def test_containment_can_be_disabled(self):
        assert lookup_airport("fly to london", allow_containment=False) is None

    def test_unknown_place(self):
        assert lookup_airport("atlantis") is None

    def test_mentions_in_order_of_appearance(self):
        mentions = find_city_mentions("Dubai first, then Mumbai")
        assert [m.code for m in mentions] == ["DXB", "BOM"]


# ============================================
# Complete extraction
# ============================================


class TestExtract:
    def test_iata_codes_with_iso_dates(self):
        params = extract_flight_params("Find flights from PEK to AUS on 2025-10-18 returning 2025-10-24", TODAY)
        assert params.departure_id == "PEK"
        assert params.arrival_id == "AUS"
        assert params.outbound_date == "2025-10-18"
        assert params.return_date == "2025-10-24"
        assert params.trip_type == "round-trip"

    def test_city_names_and_relative_date(self):
        params = extract_flight_params("Book a flight from Mumbai to Dubai tomorrow", TODAY)
        assert (params.departure_id, params.arrival_id) == ("BOM", "DXB")
        assert params.outbound_date == "2025-10-02"
        assert params.return_date is None
        assert params.trip_type == "one-way"

    def test_day_after_tomorrow_is_not_tomorrow(self):
        params = extract_flight_params("Flights from Delhi to London day after tomorrow", TODAY)
        assert params.outbound_date == "2025-10-03"

    def test_return_keyword_with_month_names(self):
        params = extract_flight_params("Fly from London to Paris on Oct 18 and back on Oct 25", TODAY)
        assert (params.departure_id, params.arrival_id) == ("LHR", "CDG")
        assert params.outbound_date == "2025-10-18"
        assert params.return_date == "2025-10-25"

    def test_second_date_becomes_return(self):
        params = extract_flight_params("Mumbai to Singapore 20/10 - 27/10", TODAY)
        assert params.outbound_date == "2025-10-20"
        assert params.return_date == "2025-10-27"

    def test_cities_taken_in_order_of_appearance(self):
        params = extract_flight_params("Dubai is where I am, I need to reach Mumbai on Oct 20", TODAY)
        assert (params.departure_id, params.arrival_id) == ("DXB", "BOM")

    def test_currency_is_not_an_airport(self):
        params = extract_flight_params("Find flights from JFK to LHR on 2025-12-01 in EUR", TODAY)
        assert (params.departure_id, params.arrival_id) == ("JFK", "LHR")
        assert params.currency == "EUR"

    def test_language_hint(self):
        params = extract_flight_params("Flights from Madrid to Rome on 2025-11-02, results in spanish", TODAY)
        assert params.language_hint == "es"

    def test_partial_city_names_in_from_to_phrase(self):
        params = extract_flight_params("Flights from Vegas to Lumpur on 2025-11-01", TODAY)
        assert (params.departure_id, params.arrival_id) == ("LAS", "KUL")
        assert params.outbound_date == "2025-11-01"

    def test_missing_date_gives_none(self):
        assert extract_flight_params("Flights from Mumbai to Dubai", TODAY) is None


# ============================================
# Partial extraction
# ============================================


class TestExtractPartial:
    def test_missing_only_the_date(self):
        params = extract_partial_flight_params("Find flights from Mumbai to Dubai", TODAY)
        assert params.missing_fields() == ["departure date"]

    def test_lone_from(self):
        params = extract_partial_flight_params("I want to fly from Mumbai", TODAY)
        assert params.departure_id == "BOM"
        assert params.arrival_id is None
        assert params.missing_fields() == ["arrival city/airport", "departure date"]

    def test_lone_to(self):
        params = extract_partial_flight_params("I need to go to Singapore", TODAY)
        assert params.arrival_id == "SIN"
        assert params.departure_id is None

    def test_date_only(self):
        params = extract_partial_flight_params("Oct 18", TODAY)
        assert params.outbound_date == "2025-10-18"
        assert params.departure_id is None and params.arrival_id is None

    def test_nothing_flight_related(self):
        assert extract_partial_flight_params("Hi, how are you?", TODAY).is_empty()

    def test_instance_and_functions_agree(self):
        text = "Flights from Bangalore to Singapore on 2025-11-05"
        assert FlightParamExtractor().extract(text, TODAY) == extract_flight_params(text, TODAY)
