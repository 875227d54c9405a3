"""Tests for conversation state, dynamic thresholds and the routing decision."""

import pytest

from flightmate.algorithms.confidence_scorer import IntentScores, score_message
from flightmate.algorithms.conversation_state import (
    ConversationState,
    detect_conversation_state,
    is_ongoing_flight_conversation,
    is_ongoing_personal_conversation,
)
from flightmate.algorithms.intent_routing import (
    BASE_THRESHOLD,
    CLEAR_WINNER_THRESHOLD,
    CLOSE_SCORES_THRESHOLD,
    apply_floors,
    decide_route,
    dynamic_threshold,
)
from flightmate.schemas.chat_schemas import AgentType, ConversationTurn

NO_STATE = ConversationState(False, False)


def turns(*pairs):
    return [ConversationTurn(role, message) for role, message in pairs]


# ============================================
# Conversation state
# ============================================


class TestConversationState:
    def test_needs_two_turns(self):
        history = turns(("user", "I want to fly to Dubai"))
        assert detect_conversation_state(history) == ConversationState(False, False)

    def test_flight_keywords_in_window(self):
        history = turns(
            ("user", "I want to fly from Mumbai to Dubai"),
            ("assistant", "Sure, when are you leaving?"),
        )
        assert is_ongoing_flight_conversation(history)

    def test_assistant_flight_question(self):
        history = turns(("user", "Let's plan something"), ("assistant", "Where do you want to go?"))
        assert is_ongoing_flight_conversation(history)

    def test_user_date_mention(self):
        history = turns(("user", "maybe next week"), ("assistant", "Okay!"))
        assert is_ongoing_flight_conversation(history)

    def test_keywords_outside_window_are_ignored(self):
        history = turns(("user", "Book a flight"), ("assistant", "Sure"))
        history += turns(*[("user", "hmm"), ("assistant", "Okay")] * 3)
        assert not is_ongoing_flight_conversation(history)

    def test_personal_exchange(self):
        history = turns(("user", "Hello"), ("assistant", "Hi there! How can I help?"))
        state = detect_conversation_state(history)
        assert state.in_personal_conversation
        assert not state.in_flight_conversation

    def test_substrings_do_not_count(self):
        history = turns(("user", "The history of this place"), ("assistant", "Interesting thought"))
        assert not is_ongoing_personal_conversation(history)
        assert not is_ongoing_flight_conversation(history)


# ============================================
# Thresholds and floors
# ============================================


class TestThresholds:
    def test_close_scores(self):
        assert dynamic_threshold(0.5, 0.45) == CLOSE_SCORES_THRESHOLD

    def test_clear_winner(self):
        assert dynamic_threshold(0.8, 0.2) == CLEAR_WINNER_THRESHOLD

    def test_in_between(self):
        assert dynamic_threshold(0.5, 0.3) == BASE_THRESHOLD

    def test_floors_only_raise(self):
        floored = apply_floors(IntentScores(0.9, 0.1), ConversationState(True, True))
        assert floored == IntentScores(0.9, 0.6)
        floored = apply_floors(IntentScores(0.1, 0.9), ConversationState(True, False))
        assert floored == IntentScores(0.7, 0.9)


# ============================================
# Decision
# ============================================


GRID = [i / 20 for i in range(21)]


class TestDecideRoute:
    def test_tie_goes_to_personal(self):
        assert decide_route(IntentScores(0.6, 0.6), NO_STATE).selected_agent == AgentType.PERSONAL

    def test_below_threshold_goes_to_personal(self):
        decision = decide_route(IntentScores(0.2, 0.0), NO_STATE)
        assert decision.selected_agent == AgentType.PERSONAL
        assert decision.applied_threshold == BASE_THRESHOLD

    def test_flight_needs_to_beat_personal(self):
        assert decide_route(IntentScores(0.8, 0.9), NO_STATE).selected_agent == AgentType.PERSONAL

    def test_clear_flight_lead_above_base_threshold_routes_to_flight(self):
        checked = 0
        for flight in GRID:
            for personal in GRID:
                if abs(flight - personal) < 0.1 or flight <= personal or flight < BASE_THRESHOLD:
                    continue
                decision = decide_route(IntentScores(flight, personal), NO_STATE)
                assert decision.selected_agent == AgentType.FLIGHT, (flight, personal)
                checked += 1
        assert checked > 0

    @pytest.mark.parametrize("personal", GRID)
    def test_selection_matches_threshold_rule(self, personal):
        for flight in GRID:
            decision = decide_route(IntentScores(flight, personal), NO_STATE)
            expected = flight >= decision.applied_threshold and flight > personal
            assert (decision.selected_agent == AgentType.FLIGHT) == expected, (flight, personal)

    def test_greeting_routes_to_personal(self):
        decision = decide_route(score_message("Hi, how are you?"), NO_STATE)
        assert decision.selected_agent == AgentType.PERSONAL

    def test_date_follow_up_stays_with_flight(self):
        history = turns(
            ("user", "I want to fly from Mumbai to Dubai"),
            ("assistant", "What's your departure date?"),
        )
        decision = decide_route(score_message("Oct 18"), detect_conversation_state(history))
        assert decision.selected_agent == AgentType.FLIGHT
        assert decision.flight_score == 0.7
        assert decision.in_flight_conversation

    def test_confidence_is_selected_score(self):
        decision = decide_route(IntentScores(0.9, 0.2), NO_STATE)
        assert decision.confidence == 0.9
