# api/deps.py
"""
Shared API dependencies
- AppServices: every store/client the routes need, built once per app
- get_services / get_current_user: FastAPI dependencies
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from loguru import logger
from pymongo.database import Database

from ..agents.agent_router import AgentRouter, AgentRouterRegistry
from ..agents.flight_agent import FlightAgent
from ..agents.personal_agent import PersonalAgent
from ..interfaces.chat_store import ChatStore
from ..interfaces.flight_search import FlightSearchClient
from ..interfaces.mongo import MongoConnection
from ..interfaces.session_context_store import SessionContextStore
from ..interfaces.user_store import UserStore
from ..llm.text_generator import TextGenerator, get_text_generator
from ..schemas.auth_schemas import CurrentUser
from ..utils.security import (
    AuthError,
    NO_TOKEN_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
    decode_access_token,
)


@dataclass
class AppServices:
    user_store: UserStore
    chat_store: ChatStore
    context_store: SessionContextStore
    text_generator: TextGenerator
    search_client: FlightSearchClient
    registry: AgentRouterRegistry
    mongo: Optional[MongoConnection] = None
    started_at: float = field(default_factory=time.time)


def build_services(
    db: Optional[Database] = None,
    mongo: Optional[MongoConnection] = None,
    text_generator: Optional[TextGenerator] = None,
    search_client: Optional[FlightSearchClient] = None,
) -> AppServices:
    """Wire stores, clients and the per-session router registry"""
    text_generator = text_generator or get_text_generator()
    search_client = search_client or FlightSearchClient()
    context_store = SessionContextStore(db)

    flight_agent = FlightAgent(text_generator, search_client)
    personal_agent = PersonalAgent(text_generator)

    def router_factory(session_id: str) -> AgentRouter:
        return AgentRouter(session_id, flight_agent, personal_agent, context_store)

    if db is None:
        logger.warning("No database configured: users, chats and contexts are kept in memory")

    return AppServices(
        user_store=UserStore(db),
        chat_store=ChatStore(db),
        context_store=context_store,
        text_generator=text_generator,
        search_client=search_client,
        registry=AgentRouterRegistry(router_factory),
        mongo=mongo,
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_current_user(
    authorization: Optional[str] = Header(None),
    services: AppServices = Depends(get_services),
) -> CurrentUser:
    """Resolve `Authorization: Bearer <token>` to the calling user"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail=NO_TOKEN_MESSAGE)

    try:
        payload = decode_access_token(authorization[len("Bearer "):].strip())
    except AuthError as e:
        logger.info(f"Authentication failed: {e}")
        raise HTTPException(status_code=401, detail=str(e))

    user = services.user_store.get_by_id(payload["userId"])
    if not user:
        raise HTTPException(status_code=401, detail=USER_NOT_FOUND_MESSAGE)

    return CurrentUser(user_id=str(user["_id"]), email=user["email"], username=user["username"])
