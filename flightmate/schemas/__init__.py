# schemas/__init__.py
"""
Schemas Package

Pydantic models and dataclasses shared across the service.
"""

from .chat_schemas import (
    AgentType,
    IntentType,
    Role,
    AGENT_LABELS,
    ConversationTurn,
    FlightQueryParams,
    RoutingDecision,
    FlightAgentResult,
    PersonalAgentResult,
    AgentScore,
    ConfidenceMetadata,
    ChatResponseEnvelope,
    FlightOption,
    FlightSearchResult,
    ChatRequest,
    ChatResponse,
)
from .auth_schemas import (
    RegisterRequest,
    LoginRequest,
    UserPublic,
    AuthResponse,
    CurrentUser,
)

__all__ = [
    "AgentType",
    "IntentType",
    "Role",
    "AGENT_LABELS",
    "ConversationTurn",
    "FlightQueryParams",
    "RoutingDecision",
    "FlightAgentResult",
    "PersonalAgentResult",
    "AgentScore",
    "ConfidenceMetadata",
    "ChatResponseEnvelope",
    "FlightOption",
    "FlightSearchResult",
    "ChatRequest",
    "ChatResponse",
    "RegisterRequest",
    "LoginRequest",
    "UserPublic",
    "AuthResponse",
    "CurrentUser",
]
