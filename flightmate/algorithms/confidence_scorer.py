"""
Intent Confidence Scorer
Heuristic [0, 1] scores for "this is a flight request" and "this is personal chat"

Flight score:
1. Keyword groups (each contributes its weight at most once)
2. Context multipliers (cities, dates, travel intent, question, urgency)
3. Competing-transport penalty, action-verb bonus
4. Clamp to 1.0

Personal score:
1. Personal-info statements, personal-info questions, chat keyword groups
2. Short-message and question bonuses, flight-vocabulary penalty
3. Clamp to 1.0

The two scores are independent and need not sum to 1.
"""

import re
from typing import NamedTuple, Tuple, Pattern

from ..llm.param_extractor import has_date_mention
from ..utils.airports import has_city_mention


class KeywordGroup(NamedTuple):
    """A set of phrases that together contribute `weight` once"""
    keywords: Tuple[str, ...]
    weight: float

    @property
    def pattern(self) -> Pattern:
        return _group_pattern(self.keywords)


class IntentScores(NamedTuple):
    flight: float
    personal: float

    def __repr__(self) -> str:
        return f"IntentScores(flight={self.flight:.2f}, personal={self.personal:.2f})"


_PATTERN_CACHE = {}


def _group_pattern(keywords: Tuple[str, ...]) -> Pattern:
    """Word-boundary alternation; spaces inside a phrase match any whitespace"""
    if keywords not in _PATTERN_CACHE:
        alternation = "|".join(
            r"\s+".join(re.escape(part) for part in keyword.split())
            for keyword in sorted(keywords, key=len, reverse=True)
        )
        _PATTERN_CACHE[keywords] = re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)
    return _PATTERN_CACHE[keywords]


# ============================================
# Flight tables
# ============================================

FLIGHT_KEYWORD_GROUPS = (
    KeywordGroup(("flight", "flights", "fly", "flying"), 0.4),
    KeywordGroup(("airport", "airports", "departure", "arrival", "layover", "stopover"), 0.35),
    KeywordGroup(("ticket", "tickets", "booking", "book", "reserve", "fare", "fares", "airfare"), 0.3),
    KeywordGroup(("airline", "airlines", "airways", "air india", "indigo", "spicejet", "vistara", "emirates"), 0.35),
    KeywordGroup(("round trip", "round-trip", "one way", "one-way", "return flight", "direct flight", "non-stop", "nonstop"), 0.4),
    KeywordGroup(("travel", "trip", "journey"), 0.3),
    KeywordGroup(("destination", "going to", "want to go"), 0.25),
    KeywordGroup(("from", "to"), 0.2),
)

CITY_MULTIPLIER = 1.3
DATE_MULTIPLIER = 1.2
TRAVEL_INTENT_MULTIPLIER = 1.4
QUESTION_MULTIPLIER = 1.1
URGENCY_MULTIPLIER = 1.2
COMPETING_TRANSPORT_PENALTY = 0.7
ACTION_VERB_BONUS = 0.1

TRAVEL_INTENT_RE = _group_pattern(
    ("want to go", "planning to", "need to", "looking for", "search for", "find flights", "find a flight")
)
URGENCY_RE = _group_pattern(("urgent", "urgently", "asap", "immediately", "quickly", "fast", "soon"))
COMPETING_TRANSPORT_RE = _group_pattern(
    ("train", "trains", "bus", "buses", "car", "cars", "drive", "driving", "walk", "walking")
)
ACTION_VERB_RE = re.compile(r"\b(?:show|find|search|look|check|availab)\w*", re.IGNORECASE)


# ============================================
# Personal tables
# ============================================

PERSONAL_KEYWORD_GROUPS = (
    KeywordGroup(("hello", "hi", "hey", "greetings", "good morning", "good afternoon", "good evening"), 0.5),
    KeywordGroup(("how are you", "what's up", "whats up", "sup", "how do you do"), 0.5),
    KeywordGroup(("help", "assist", "support", "can you help"), 0.3),
    KeywordGroup(("thank", "thanks", "thank you", "appreciate", "grateful"), 0.4),
    KeywordGroup(("who are you", "what can you do", "your name", "what are you"), 0.5),
    KeywordGroup(("tell me about", "explain", "what is", "describe"), 0.3),
)

# Only explicit phrases; a bare "from" or "I'm" says nothing personal
PERSONAL_INFO_STATEMENTS = (
    KeywordGroup(("my name is", "call me", "i'm called", "i am called"), 0.7),
    KeywordGroup(("my age is", "years old", "aged"), 0.6),
    KeywordGroup(("i live in", "i'm from", "i am from", "i reside in", "i stay in"), 0.6),
    KeywordGroup(("i work as", "i work at", "i am a", "i'm a", "my job", "i'm employed as"), 0.6),
    KeywordGroup(("my email", "my phone", "my number", "contact me at"), 0.6),
)

PERSONAL_INFO_QUESTIONS = (
    KeywordGroup(("what is my name", "what's my name", "my name", "do you know my name"), 0.6),
    KeywordGroup(("who am i", "what do you know about me", "tell me about myself"), 0.6),
    KeywordGroup(("where am i from", "where do i live", "my location"), 0.6),
    KeywordGroup(("how old am i", "what is my age", "my age"), 0.6),
    KeywordGroup(("what do i do", "my job", "my work", "my occupation"), 0.5),
)

SHORT_MESSAGE_WORDS = 3
SHORT_MESSAGE_BONUS = 0.3
PERSONAL_QUESTION_BONUS = 0.2
FLIGHT_VOCABULARY_PENALTY = 0.8

FLIGHT_WORDS_RE = re.compile(r"\b(?:flights?|fly(?:ing)?|book(?:ing)?)\b", re.IGNORECASE)
FLIGHT_OR_AIRPORT_RE = re.compile(r"\b(?:flights?|fly(?:ing)?|book(?:ing)?|airports?)\b", re.IGNORECASE)
FLIGHT_DOMAIN_RE = re.compile(
    r"\b(?:flights?|fly(?:ing)?|book(?:ing)?|airports?|departures?|arrivals?)\b", re.IGNORECASE
)


def _group_hits(message: str, groups: Tuple[KeywordGroup, ...]) -> float:
    return sum(group.weight for group in groups if group.pattern.search(message))


# ============================================
# Scoring
# ============================================

def score_flight_intent(message: str) -> float:
    """How strongly a message reads as a flight-search request"""
    if not message:
        return 0.0

    score = _group_hits(message, FLIGHT_KEYWORD_GROUPS)

    if has_city_mention(message):
        score *= CITY_MULTIPLIER
    if has_date_mention(message):
        score *= DATE_MULTIPLIER
    if TRAVEL_INTENT_RE.search(message):
        score *= TRAVEL_INTENT_MULTIPLIER
    if "?" in message:
        score *= QUESTION_MULTIPLIER
    if URGENCY_RE.search(message):
        score *= URGENCY_MULTIPLIER

    if COMPETING_TRANSPORT_RE.search(message):
        score *= COMPETING_TRANSPORT_PENALTY

    if ACTION_VERB_RE.search(message):
        score += ACTION_VERB_BONUS

    return min(score, 1.0)


def score_personal_intent(message: str) -> float:
    """How strongly a message reads as personal chat or personal info"""
    if not message:
        return 0.0

    score = (
        _group_hits(message, PERSONAL_INFO_STATEMENTS)
        + _group_hits(message, PERSONAL_INFO_QUESTIONS)
        + _group_hits(message, PERSONAL_KEYWORD_GROUPS)
    )

    if len(message.split()) <= SHORT_MESSAGE_WORDS and not FLIGHT_WORDS_RE.search(message):
        score += SHORT_MESSAGE_BONUS

    if "?" in message and not FLIGHT_OR_AIRPORT_RE.search(message):
        score += PERSONAL_QUESTION_BONUS

    if FLIGHT_DOMAIN_RE.search(message):
        score *= FLIGHT_VOCABULARY_PENALTY

    return min(score, 1.0)


def score_message(message: str) -> IntentScores:
    return IntentScores(
        flight=score_flight_intent(message),
        personal=score_personal_intent(message),
    )
