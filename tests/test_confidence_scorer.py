"""Tests for the keyword confidence scorer."""

import pytest

from flightmate.algorithms.confidence_scorer import (
    score_flight_intent,
    score_message,
    score_personal_intent,
)

MESSAGES = [
    "",
    "Hi, how are you?",
    "Find flights from Mumbai to Dubai tomorrow, urgent!",
    "Book a round-trip flight from PEK to AUS on 2025-10-18 returning 2025-10-24?",
    "My name is Asha, I live in Pune and I'm a nurse. What is my name?",
    "Is the train from Mumbai to Delhi faster than driving?",
    "Oct 18",
]


class TestFlightScore:
    @pytest.mark.parametrize("message", MESSAGES)
    def test_scores_stay_in_unit_interval(self, message):
        scores = score_message(message)
        assert 0.0 <= scores.flight <= 1.0
        assert 0.0 <= scores.personal <= 1.0

    def test_strong_flight_request_clamps_to_one(self):
        assert score_flight_intent("Find flights from Mumbai to Dubai tomorrow") == 1.0

    def test_greeting_has_no_flight_signal(self):
        assert score_flight_intent("Hi, how are you?") == 0.0

    def test_keywords_need_word_boundaries(self):
        assert score_flight_intent("I saw a butterfly") == 0.0
        assert score_flight_intent("Photography stories") == 0.0

    def test_competing_transport_lowers_score(self):
        plain = score_flight_intent("A trip from Mumbai to Delhi")
        by_train = score_flight_intent("A trip from Mumbai to Delhi by train")
        assert by_train < plain

    def test_city_mention_raises_score(self):
        assert score_flight_intent("a trip to Dubai") > score_flight_intent("a trip to the beach")

    def test_action_verb_bonus(self):
        assert score_flight_intent("show me") == pytest.approx(0.1)


class TestPersonalScore:
    def test_greeting(self):
        scores = score_message("Hi, how are you?")
        assert scores.personal == 1.0
        assert scores.personal > scores.flight

    def test_personal_statement(self):
        assert score_personal_intent("My name is Asha and I live in Pune") >= 0.7

    def test_route_is_not_personal(self):
        # "from" alone says nothing about the user
        assert score_personal_intent("Flights from Mumbai to Dubai") == 0.0

    def test_short_message_bonus(self):
        assert score_personal_intent("sounds good") == pytest.approx(0.3)

    def test_short_flight_message_gets_no_bonus(self):
        assert score_personal_intent("book flights") == 0.0

    def test_flight_vocabulary_penalty(self):
        plain = score_personal_intent("thanks for the help with everything today")
        penalized = score_personal_intent("thanks for the help with the flight today")
        assert penalized == pytest.approx(plain * 0.8)
