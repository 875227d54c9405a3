"""
Intent Routing Decision
Combines raw intent scores with conversation-state floors and a dynamic
threshold to pick the assistant for a message.

1. Floors: an ongoing flight search lifts the flight score to 0.7, an
   ongoing personal exchange lifts the personal score to 0.6
2. Threshold from the score gap: close scores need 0.5, a clear winner
   only 0.25, everything else 0.3
3. Flight wins iff it clears the threshold AND beats the personal score;
   ties and all-below-threshold go to the personal assistant
"""

from loguru import logger

from ..schemas.chat_schemas import AgentType, RoutingDecision
from .confidence_scorer import IntentScores
from .conversation_state import ConversationState

FLIGHT_CONVERSATION_FLOOR = 0.7
PERSONAL_CONVERSATION_FLOOR = 0.6

BASE_THRESHOLD = 0.3
CLOSE_SCORES_THRESHOLD = 0.5
CLEAR_WINNER_THRESHOLD = 0.25
CLOSE_SCORES_GAP = 0.1
CLEAR_WINNER_GAP = 0.3


def apply_floors(scores: IntentScores, state: ConversationState) -> IntentScores:
    """Raise scores to their conversation floors; never lowers a score"""
    flight, personal = scores
    if state.in_flight_conversation:
        flight = max(flight, FLIGHT_CONVERSATION_FLOOR)
    if state.in_personal_conversation:
        personal = max(personal, PERSONAL_CONVERSATION_FLOOR)
    return IntentScores(flight=flight, personal=personal)


def dynamic_threshold(flight_score: float, personal_score: float) -> float:
    gap = abs(flight_score - personal_score)
    if gap < CLOSE_SCORES_GAP:
        return CLOSE_SCORES_THRESHOLD
    if gap > CLEAR_WINNER_GAP:
        return CLEAR_WINNER_THRESHOLD
    return BASE_THRESHOLD


def decide_route(scores: IntentScores, state: ConversationState) -> RoutingDecision:
    """Pick the assistant for one message"""
    floored = apply_floors(scores, state)
    threshold = dynamic_threshold(floored.flight, floored.personal)

    if floored.flight >= threshold and floored.flight > floored.personal:
        selected = AgentType.FLIGHT
    else:
        selected = AgentType.PERSONAL

    logger.debug(
        f"Routing: raw={scores!r} floored={floored!r} threshold={threshold} "
        f"state={tuple(state)} -> {selected.value}"
    )

    return RoutingDecision(
        selected_agent=selected,
        flight_score=floored.flight,
        personal_score=floored.personal,
        applied_threshold=threshold,
        in_flight_conversation=state.in_flight_conversation,
        in_personal_conversation=state.in_personal_conversation,
    )
