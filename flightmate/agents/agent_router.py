# agents/agent_router.py
"""
Intent Router
One AgentRouter per chat session decides, message by message, whether the
flight assistant or the personal assistant answers.

Per message:
1. Load the persisted session context, rebuild the partial flight query
2. Multi-route guard (short-circuits to a clarification)
3. Score -> conversation-state floors -> dynamic threshold -> pick assistant
4. Dispatch, record both turns, persist context updates
5. Wrap everything in a ChatResponseEnvelope

Nothing raises out of chat(): assistant failures become an apology.
"""

import threading
import time
from datetime import date
from typing import Optional, Dict, Any, List, Callable, Tuple, Iterable

from loguru import logger

from ..algorithms.confidence_scorer import score_message
from ..algorithms.conversation_state import detect_conversation_state
from ..algorithms.intent_routing import decide_route
from ..algorithms.route_guard import detect_multi_route_request, build_clarification_message
from ..interfaces.session_context_store import SessionContextStore
from ..schemas.chat_schemas import (
    AGENT_LABELS,
    AgentScore,
    AgentType,
    ChatResponseEnvelope,
    ConfidenceMetadata,
    ConversationTurn,
    FlightQueryParams,
    IntentType,
    Role,
    RoutingDecision,
)
from .flight_agent import FlightAgent
from .personal_agent import PersonalAgent

APOLOGY_MESSAGE = (
    "I'm sorry, something went wrong while handling your request. "
    "Could you try again or rephrase it?"
)


class AgentRouter:
    """Mutable per-session state: history, partial flight query, current intent"""

    def __init__(
        self,
        session_id: str,
        flight_agent: FlightAgent,
        personal_agent: PersonalAgent,
        context_store: Optional[SessionContextStore] = None,
    ):
        self.session_id = session_id
        self.flight_agent = flight_agent
        self.personal_agent = personal_agent
        self.context_store = context_store

        self.history: List[ConversationTurn] = []
        self.flight_query = FlightQueryParams()
        self.current_intent: Optional[IntentType] = None
        self.last_decision: Optional[RoutingDecision] = None

    def seed_history(self, turns: Iterable[ConversationTurn]):
        """Restore earlier turns (e.g. from stored messages after a restart)"""
        self.history.extend(turns)

    def reset(self):
        self.history = []
        self.flight_query = FlightQueryParams()
        self.current_intent = None
        self.last_decision = None
        logger.info(f"Router state reset for session {self.session_id}")

    async def chat(self, message: str, today: Optional[date] = None) -> ChatResponseEnvelope:
        started = time.perf_counter()
        context = self._load_context()
        self.flight_query = self.flight_query.merge(FlightQueryParams.from_context(context))

        guard = detect_multi_route_request(message)
        if guard.triggered:
            reply = build_clarification_message(guard.routes)
            self._record(message, reply)
            self.current_intent = IntentType.CLARIFICATION
            return ChatResponseEnvelope(
                response_text=reply,
                selected_agent_label=AGENT_LABELS[AgentType.FLIGHT],
                intent_type=IntentType.CLARIFICATION,
                confidence_metadata=ConfidenceMetadata(confidence=1.0, selected_agent=AgentType.FLIGHT.value),
                structured_data={
                    "routes": [route.to_dict() for route in guard.routes],
                    "route_count": len(guard.routes),
                },
                requires_more_info=True,
                suggested_questions=[
                    f"Search flights from {route.departure_id} to {route.arrival_id}" for route in guard.routes
                ],
                context=context,
                processing_time_ms=_elapsed_ms(started),
            )

        decision = decide_route(score_message(message), detect_conversation_state(self.history))
        self.last_decision = decision
        logger.info(
            f"Agent routing [{self.session_id}] flight={decision.flight_score:.2f} "
            f"personal={decision.personal_score:.2f} threshold={decision.applied_threshold} "
            f"-> {decision.selected_agent.value}"
        )

        self.history.append(ConversationTurn(Role.USER.value, message))
        try:
            if decision.selected_agent == AgentType.FLIGHT:
                envelope = await self._handle_flight(message, decision, context, today)
            else:
                envelope = await self._handle_personal(message, decision, context)
        except Exception as e:
            logger.exception(f"{decision.selected_agent.value} assistant failed: {e}")
            envelope = ChatResponseEnvelope(
                response_text=APOLOGY_MESSAGE,
                selected_agent_label=AGENT_LABELS[decision.selected_agent],
                intent_type=IntentType(decision.selected_agent.value),
                confidence_metadata=_metadata(decision),
                requires_more_info=True,
                context=context,
            )

        self.history.append(ConversationTurn(Role.ASSISTANT.value, envelope.response_text))
        self.current_intent = envelope.intent_type
        envelope.processing_time_ms = _elapsed_ms(started)
        return envelope

    # ============================================
    # Dispatch
    # ============================================

    async def _handle_flight(
        self, message: str, decision: RoutingDecision, context: Dict[str, Any], today: Optional[date]
    ) -> ChatResponseEnvelope:
        result = await self.flight_agent.process(message, self.history[:-1], self.flight_query, today)

        if result.context_updates:
            self.flight_query = self.flight_query.merge(FlightQueryParams.from_context(result.context_updates))
            context = self._save_context(context, result.context_updates)

        metadata = _metadata(decision)
        metadata.trip_type = result.trip_type
        metadata.search_params = result.search_params
        metadata.missing_fields = result.missing_fields

        return ChatResponseEnvelope(
            response_text=result.message,
            selected_agent_label=AGENT_LABELS[AgentType.FLIGHT],
            intent_type=IntentType.FLIGHT,
            confidence_metadata=metadata,
            structured_data=result.flight_data,
            requires_more_info=result.requires_more_info,
            suggested_questions=result.suggested_questions,
            context=context,
        )

    async def _handle_personal(
        self, message: str, decision: RoutingDecision, context: Dict[str, Any]
    ) -> ChatResponseEnvelope:
        result = await self.personal_agent.process(message, context)

        if result.context_updates:
            context = self._save_context(context, result.context_updates)

        return ChatResponseEnvelope(
            response_text=result.message,
            selected_agent_label=AGENT_LABELS[AgentType.PERSONAL],
            intent_type=IntentType.PERSONAL,
            confidence_metadata=_metadata(decision),
            structured_data={"context_extracted": result.context_extracted} if result.context_extracted else None,
            suggested_questions=result.suggested_follow_ups,
            context=context,
        )

    # ============================================
    # History / context
    # ============================================

    def _record(self, user_message: str, assistant_message: str):
        self.history.append(ConversationTurn(Role.USER.value, user_message))
        self.history.append(ConversationTurn(Role.ASSISTANT.value, assistant_message))

    def _load_context(self) -> Dict[str, Any]:
        if self.context_store is None:
            return {}
        return self.context_store.load(self.session_id) or {}

    def _save_context(self, context: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
        if self.context_store is not None:
            self.context_store.merge(self.session_id, updates)
        return {**context, **updates}


def _metadata(decision: RoutingDecision) -> ConfidenceMetadata:
    return ConfidenceMetadata(
        confidence=decision.confidence,
        applied_threshold=decision.applied_threshold,
        selected_agent=decision.selected_agent.value,
        all_scores=[
            AgentScore(agent=AGENT_LABELS[AgentType.FLIGHT], confidence=decision.flight_score),
            AgentScore(agent=AGENT_LABELS[AgentType.PERSONAL], confidence=decision.personal_score),
        ],
    )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


# ============================================
# Registry
# ============================================

class AgentRouterRegistry:
    """
    session_id -> AgentRouter, guarded by a lock.
    Requests for one session are expected to arrive one at a time.
    """

    def __init__(self, factory: Callable[[str], AgentRouter]):
        self._factory = factory
        self._routers: Dict[str, AgentRouter] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> Tuple[AgentRouter, bool]:
        """Returns (router, created)"""
        with self._lock:
            router = self._routers.get(session_id)
            if router is not None:
                return router, False
            router = self._factory(session_id)
            self._routers[session_id] = router
            return router, True

    def get(self, session_id: str) -> Optional[AgentRouter]:
        with self._lock:
            return self._routers.get(session_id)

    def reset(self, session_id: str) -> bool:
        with self._lock:
            router = self._routers.get(session_id)
        if router is None:
            return False
        router.reset()
        return True

    def drop(self, session_id: str):
        with self._lock:
            self._routers.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._routers)
