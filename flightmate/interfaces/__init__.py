# interfaces/__init__.py
"""
Interfaces Package

Data stores (MongoDB with in-memory fallback) and the external flight search client:
- mongo: connection management
- user_store, chat_store, session_context_store
- flight_search: SerpAPI Google Flights client
"""

from .mongo import MongoConnection, get_mongo_connection, close_mongo_connection
from .user_store import UserStore, DuplicateEmailError
from .chat_store import ChatStore, is_valid_id
from .session_context_store import SessionContextStore
from .flight_search import FlightSearchClient, parse_flights

__all__ = [
    "MongoConnection",
    "get_mongo_connection",
    "close_mongo_connection",
    "UserStore",
    "DuplicateEmailError",
    "ChatStore",
    "is_valid_id",
    "SessionContextStore",
    "FlightSearchClient",
    "parse_flights",
]
