"""
Routing Algorithms Module
Keyword confidence scoring, conversation state, threshold routing and the multi-route guard
"""

from .confidence_scorer import score_message, score_flight_intent, score_personal_intent, IntentScores
from .conversation_state import detect_conversation_state, ConversationState
from .intent_routing import decide_route, dynamic_threshold, apply_floors
from .route_guard import detect_multi_route_request, build_clarification_message, RouteGuardResult

__all__ = [
    "score_message",
    "score_flight_intent",
    "score_personal_intent",
    "IntentScores",
    "detect_conversation_state",
    "ConversationState",
    "decide_route",
    "dynamic_threshold",
    "apply_floors",
    "detect_multi_route_request",
    "build_clarification_message",
    "RouteGuardResult",
]
