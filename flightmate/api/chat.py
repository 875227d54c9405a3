# api/chat.py
"""
Chat API Endpoint
Main conversational interface: routes each prompt to the flight or personal
assistant through the session's AgentRouter and persists both messages.

Endpoints:
- POST   /api/chat/generate
- GET    /api/chat/sessions
- GET    /api/chat/sessions/{session_id}/messages
- DELETE /api/chat/sessions/{session_id}/context
"""

from typing import Dict, Any

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..algorithms.conversation_state import FLIGHT_WINDOW
from ..config import settings
from ..interfaces.chat_store import is_valid_id
from ..llm.prompts import SESSION_TITLE_PROMPT, SESSION_TITLE_REFRESH_PROMPT
from ..llm.text_generator import TextGenerator
from ..schemas.auth_schemas import CurrentUser
from ..schemas.chat_schemas import (
    ChatRequest,
    ChatResponse,
    ConversationTurn,
    Role,
    SessionList,
    SessionMessages,
    SessionSummary,
    StoredMessage,
)
from ..utils.text_helpers import DEFAULT_SESSION_TITLE, clean_title
from .deps import AppServices, get_current_user, get_services

router = APIRouter(prefix="/api/chat", tags=["chat"])

TITLE_CONTEXT_MESSAGES = 10


# ============================================
# Helpers
# ============================================

def _authorized_session(services: AppServices, session_id: str, user: CurrentUser) -> Dict[str, Any]:
    """400 for malformed ids, 404 for unknown sessions, 403 for someone else's"""
    if not is_valid_id(session_id):
        raise HTTPException(status_code=400, detail="Invalid session ID format")
    session = services.chat_store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Chat session not found")
    if session["user_id"] != user.user_id:
        raise HTTPException(status_code=403, detail="Access denied to this chat session")
    return session


async def generate_session_title(text_generator: TextGenerator, prompt: str) -> str:
    raw = await text_generator.complete_or(
        SESSION_TITLE_PROMPT.format(user_message=prompt),
        fallback=DEFAULT_SESSION_TITLE,
    )
    return clean_title(raw)


async def refresh_session_title(services: AppServices, session: Dict[str, Any]):
    """Regenerate the title from the latest messages; keeps the old one on failure"""
    session_id = str(session["_id"])
    recent = services.chat_store.get_recent_messages(session_id, TITLE_CONTEXT_MESSAGES)
    conversation = "\n".join(
        f"{'User' if m['is_user_message'] else 'Assistant'}: {m['message']}" for m in recent
    )
    raw = await services.text_generator.complete_or(
        SESSION_TITLE_REFRESH_PROMPT.format(conversation=conversation),
        fallback=session["title"],
    )
    title = clean_title(raw)
    if title != DEFAULT_SESSION_TITLE and title != session["title"]:
        services.chat_store.update_title(session_id, title)
        logger.info(f"Session {session_id} retitled: {title}")


def _stored_turns(services: AppServices, session_id: str):
    for message in services.chat_store.get_recent_messages(session_id, FLIGHT_WINDOW):
        role = Role.USER if message["is_user_message"] else Role.ASSISTANT
        yield ConversationTurn(role.value, message["message"])


# ============================================
# Endpoints
# ============================================

@router.post("/generate", response_model=ChatResponse)
async def generate(
    request: ChatRequest,
    current_user: CurrentUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    prompt = request.prompt.strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required and must be a non-empty string")

    if request.session_id:
        session = _authorized_session(services, request.session_id, current_user)
        is_new_session = False
    else:
        title = await generate_session_title(services.text_generator, prompt)
        session = services.chat_store.create_session(current_user.user_id, title)
        is_new_session = True

    session_id = str(session["_id"])
    agent_router, created = services.registry.get_or_create(session_id)

    if request.is_new_chat:
        agent_router.reset()
        services.context_store.clear(session_id)
    elif created and not is_new_session:
        agent_router.seed_history(_stored_turns(services, session_id))

    envelope = await agent_router.chat(prompt)

    services.chat_store.add_message(session_id, is_user_message=True, message=prompt)
    services.chat_store.add_message(session_id, is_user_message=False, message=envelope.response_text)

    message_count = services.chat_store.count_messages(session_id)
    if message_count % settings.TITLE_REFRESH_INTERVAL == 0:
        await refresh_session_title(services, session)

    return ChatResponse(
        **envelope.model_dump(),
        session_id=session_id,
        is_new_session=is_new_session,
        prompt=prompt,
    )


@router.get("/sessions", response_model=SessionList)
async def list_sessions(
    current_user: CurrentUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    sessions = services.chat_store.list_sessions(current_user.user_id)
    return SessionList(
        total_sessions=len(sessions),
        sessions=[SessionSummary(**s) for s in sessions],
    )


@router.get("/sessions/{session_id}/messages", response_model=SessionMessages)
async def get_session_messages(
    session_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    session = _authorized_session(services, session_id, current_user)
    messages = services.chat_store.get_messages(session_id)
    return SessionMessages(
        session_id=session_id,
        session_title=session["title"],
        message_count=len(messages),
        messages=[
            StoredMessage(
                id=str(m["_id"]),
                is_user_message=m["is_user_message"],
                message=m["message"],
                created_at=m.get("created_at"),
                updated_at=m.get("updated_at"),
            )
            for m in messages
        ],
    )


@router.delete("/sessions/{session_id}/context")
async def reset_session_context(
    session_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    """Forget the session's routing state and persisted context; messages stay"""
    _authorized_session(services, session_id, current_user)
    services.registry.reset(session_id)
    services.context_store.clear(session_id)
    return {"success": True, "session_id": session_id, "message": "Session context cleared"}
