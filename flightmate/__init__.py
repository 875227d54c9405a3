# flightmate/__init__.py
"""
FlightMate Package

Conversational assistant that routes every chat message to one of two agents:
- Flight Agent: extracts route/dates, asks for what is missing, searches flights
- Personal Agent: small talk, remembers facts the user shares about themselves

Routing is decided per message from keyword confidence scores, the recent
conversation state and a guard that asks for clarification on multi-route requests.
"""

__version__ = "1.0.0"

# Package structure:
# flightmate/
# ├── __init__.py           <- This file
# ├── main.py               <- FastAPI application entry
# ├── config.py             <- Configuration settings
# │
# ├── agents/               <- Agents
# │   ├── agent_router.py   <- Per-session routing + dispatch
# │   ├── flight_agent.py   <- Flight search conversation
# │   └── personal_agent.py <- Personal assistant
# │
# ├── algorithms/           <- Deterministic routing logic
# │   ├── confidence_scorer.py
# │   ├── conversation_state.py
# │   ├── intent_routing.py
# │   └── route_guard.py
# │
# ├── api/                  <- FastAPI Routers
# │   ├── auth.py           <- /api/auth
# │   ├── users.py          <- /api/user
# │   ├── chat.py           <- /api/chat
# │   └── health.py         <- /api/health
# │
# ├── interfaces/           <- MongoDB stores + flight search client
# ├── llm/                  <- Prompts, text generation, parameter extraction
# ├── schemas/              <- Pydantic models + routing types
# └── utils/                <- Airports, security, text helpers
