# agents/__init__.py
"""
Agents Package

- FlightAgent: gathers flight parameters and runs the search
- PersonalAgent: conversational replies + personal context
- AgentRouter: picks one of the two per message
"""

from .flight_agent import FlightAgent
from .personal_agent import PersonalAgent
from .agent_router import AgentRouter, AgentRouterRegistry

__all__ = [
    "FlightAgent",
    "PersonalAgent",
    "AgentRouter",
    "AgentRouterRegistry",
]
