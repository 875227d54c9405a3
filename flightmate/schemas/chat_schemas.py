# schemas/chat_schemas.py
"""
Chat schemas for FlightMate
Covers the routing core (flight query, routing decision, response envelope)
and the chat API request/response models.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum

from pydantic import BaseModel, Field


# ============================================
# Enums
# ============================================

class AgentType(str, Enum):
    FLIGHT = "flight"
    PERSONAL = "personal"


class IntentType(str, Enum):
    FLIGHT = "flight"
    PERSONAL = "personal"
    CLARIFICATION = "clarification"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


AGENT_LABELS = {
    AgentType.FLIGHT: "Flight Assistant",
    AgentType.PERSONAL: "Personal Assistant",
}


# ============================================
# Conversation turns
# ============================================

@dataclass(frozen=True)
class ConversationTurn:
    """A single role-tagged message in a session's history"""
    role: str
    message: str


# ============================================
# Flight query (Parameter Extractor output)
# ============================================

# Context keys under which in-progress flight fields are persisted
FLIGHT_CONTEXT_KEYS = {
    "departure_id": "flight_departure_id",
    "arrival_id": "flight_arrival_id",
    "outbound_date": "flight_outbound_date",
    "return_date": "flight_return_date",
    "currency": "flight_currency",
    "language_hint": "flight_language_hint",
}

MISSING_FIELD_LABELS = (
    ("departure_id", "departure city/airport"),
    ("arrival_id", "arrival city/airport"),
    ("outbound_date", "departure date"),
)


@dataclass(frozen=True)
class FlightQueryParams:
    """
    Structured flight query. Every field is optional so partial queries
    can be carried across turns; a query is complete only with departure,
    arrival and outbound date.
    """
    departure_id: Optional[str] = None
    arrival_id: Optional[str] = None
    outbound_date: Optional[str] = None
    return_date: Optional[str] = None
    currency: Optional[str] = None
    language_hint: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.departure_id and self.arrival_id and self.outbound_date)

    def is_empty(self) -> bool:
        return not (self.departure_id or self.arrival_id or self.outbound_date)

    def missing_fields(self) -> List[str]:
        return [label for name, label in MISSING_FIELD_LABELS if not getattr(self, name)]

    def merge(self, newer: Optional["FlightQueryParams"]) -> "FlightQueryParams":
        """Field-by-field merge: non-empty fields of `newer` win"""
        if newer is None:
            return self
        updates = {f.name: getattr(newer, f.name) for f in fields(newer) if getattr(newer, f.name)}
        return replace(self, **updates)

    @property
    def trip_type(self) -> str:
        return "round-trip" if self.return_date else "one-way"

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}

    def to_context(self) -> Dict[str, Any]:
        return {FLIGHT_CONTEXT_KEYS[name]: value for name, value in self.to_dict().items()}

    @classmethod
    def from_context(cls, context: Optional[Dict[str, Any]]) -> "FlightQueryParams":
        if not context:
            return cls()
        values = {name: context.get(key) for name, key in FLIGHT_CONTEXT_KEYS.items() if context.get(key)}
        return cls(**values)


# ============================================
# Routing decision
# ============================================

@dataclass(frozen=True)
class RoutingDecision:
    """Derived per message, never stored"""
    selected_agent: AgentType
    flight_score: float
    personal_score: float
    applied_threshold: float
    in_flight_conversation: bool = False
    in_personal_conversation: bool = False

    @property
    def confidence(self) -> float:
        if self.selected_agent == AgentType.FLIGHT:
            return self.flight_score
        return self.personal_score


# ============================================
# Agent results
# ============================================

@dataclass
class FlightAgentResult:
    message: str
    flight_data: Optional[Dict[str, Any]] = None
    search_params: Optional[Dict[str, Any]] = None
    trip_type: Optional[str] = None
    requires_more_info: bool = False
    suggested_questions: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    context_updates: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PersonalAgentResult:
    message: str
    context_extracted: Dict[str, Any] = field(default_factory=dict)
    context_updates: Dict[str, Any] = field(default_factory=dict)
    suggested_follow_ups: List[str] = field(default_factory=list)


# ============================================
# Response envelope
# ============================================

class AgentScore(BaseModel):
    agent: str
    confidence: float


class ConfidenceMetadata(BaseModel):
    """Routing transparency attached to every reply"""
    confidence: float = Field(0.0, ge=0, le=1)
    applied_threshold: Optional[float] = None
    selected_agent: str
    all_scores: List[AgentScore] = Field(default_factory=list)

    # Flight-path extras
    trip_type: Optional[str] = None
    search_params: Optional[Dict[str, Any]] = None
    missing_fields: List[str] = Field(default_factory=list)


class ChatResponseEnvelope(BaseModel):
    """Uniform output regardless of which assistant answered"""
    response_text: str
    selected_agent_label: str
    intent_type: IntentType
    confidence_metadata: ConfidenceMetadata
    structured_data: Optional[Dict[str, Any]] = None
    requires_more_info: bool = False
    suggested_questions: List[str] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)
    processing_time_ms: int = 0


# ============================================
# Flight search results
# ============================================

class FlightEndpoint(BaseModel):
    airport: str = "Unknown"
    time: str = "Unknown"
    date: str = "Unknown"


class FlightPrice(BaseModel):
    amount: float = 0
    currency: str = "USD"


class Layover(BaseModel):
    duration: Optional[int] = None
    name: Optional[str] = None
    id: Optional[str] = None
    overnight: Optional[bool] = None


class FlightOption(BaseModel):
    """A single flight option returned by the search service"""
    airline: str
    departure: FlightEndpoint
    arrival: FlightEndpoint
    duration: str = "Unknown"
    price: FlightPrice = Field(default_factory=FlightPrice)
    stops: int = 0
    layovers: Optional[List[Layover]] = None
    booking_link: Optional[str] = None


class FlightSearchResult(BaseModel):
    success: bool
    flights: List[FlightOption] = Field(default_factory=list)
    error: Optional[str] = None
    google_flights_url: Optional[str] = None


# ============================================
# Chat API models
# ============================================

class ChatRequest(BaseModel):
    """Chat request model"""
    prompt: str = Field(..., max_length=4000, description="User's message")
    session_id: Optional[str] = Field(None, description="Session ID for context continuity")
    is_new_chat: bool = Field(False, description="Reset the session's conversation state")


class ChatResponse(ChatResponseEnvelope):
    """Chat response model"""
    session_id: str
    is_new_session: bool = False
    prompt: str
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class LastMessagePreview(BaseModel):
    text: str
    is_user_message: bool
    timestamp: Optional[datetime] = None


class SessionSummary(BaseModel):
    session_id: str
    title: str
    message_count: int = 0
    last_message: Optional[LastMessagePreview] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionList(BaseModel):
    total_sessions: int
    sessions: List[SessionSummary]


class StoredMessage(BaseModel):
    id: str
    is_user_message: bool
    message: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionMessages(BaseModel):
    session_id: str
    session_title: str
    message_count: int
    messages: List[StoredMessage]
