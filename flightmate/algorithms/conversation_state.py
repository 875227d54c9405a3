"""
Conversation State Tracker
Detects whether a session is already in the middle of a flight search or
a personal exchange, so short follow-ups ("Oct 18", "yes") stay with the
assistant that asked for them.

The result only ever raises scores; it never lowers them.
"""

import re
from typing import NamedTuple, Sequence, Optional

from ..llm.param_extractor import has_date_mention
from ..schemas.chat_schemas import ConversationTurn, Role

MIN_TURNS = 2
FLIGHT_WINDOW = 6
PERSONAL_WINDOW = 4


def _phrases(*phrases: str) -> "re.Pattern":
    alternation = "|".join(r"\s+".join(map(re.escape, p.split())) for p in phrases)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


FLIGHT_CONTINUATION_RE = _phrases(
    "flight", "flights", "fly", "airport", "departure", "arrival", "destination",
    "return date", "one-way", "round-trip", "booking", "travel date",
    "when would you like", "where are you flying", "provide a date",
    "need to know", "departure date", "which date", "searching for",
    "found flights", "flight options", "book a flight", "flight details",
)

ASSISTANT_FLIGHT_QUESTION_RE = _phrases(
    "departure", "arrival", "date", "dates", "when", "where", "destination", "return", "flight", "flights",
)

USER_FLIGHT_DATA_RE = _phrases("from", "to")

PERSONAL_CONTINUATION_RE = _phrases(
    "hello", "hi", "hey", "how are you", "what's up", "my name",
    "tell me about", "who are you", "help", "assist", "support", "thank", "thanks",
)

ASSISTANT_PERSONAL_QUESTION_RE = _phrases(
    "your name", "tell me about yourself", "how can i help", "personal",
)


class ConversationState(NamedTuple):
    in_flight_conversation: bool
    in_personal_conversation: bool


def _last_turn(history: Sequence[ConversationTurn], role: Role) -> Optional[ConversationTurn]:
    for turn in reversed(history):
        if turn.role == role.value:
            return turn
    return None


def is_ongoing_flight_conversation(history: Sequence[ConversationTurn]) -> bool:
    if len(history) < MIN_TURNS:
        return False

    recent_text = " ".join(turn.message for turn in history[-FLIGHT_WINDOW:])
    if FLIGHT_CONTINUATION_RE.search(recent_text):
        return True

    assistant_turn = _last_turn(history, Role.ASSISTANT)
    if assistant_turn and ASSISTANT_FLIGHT_QUESTION_RE.search(assistant_turn.message):
        return True

    user_turn = _last_turn(history, Role.USER)
    if user_turn and (USER_FLIGHT_DATA_RE.search(user_turn.message) or has_date_mention(user_turn.message)):
        return True

    return False


def is_ongoing_personal_conversation(history: Sequence[ConversationTurn]) -> bool:
    if len(history) < MIN_TURNS:
        return False

    recent_text = " ".join(turn.message for turn in history[-PERSONAL_WINDOW:])
    if PERSONAL_CONTINUATION_RE.search(recent_text):
        return True

    assistant_turn = _last_turn(history, Role.ASSISTANT)
    return bool(assistant_turn and ASSISTANT_PERSONAL_QUESTION_RE.search(assistant_turn.message))


def detect_conversation_state(history: Sequence[ConversationTurn]) -> ConversationState:
    """Both flags are False until the session has at least two turns"""
    return ConversationState(
        in_flight_conversation=is_ongoing_flight_conversation(history),
        in_personal_conversation=is_ongoing_personal_conversation(history),
    )
