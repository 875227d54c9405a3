# agents/flight_agent.py
"""
Flight Assistant
Handles messages routed as flight searches:

1. Extract whatever flight fields the message carries and merge them over
   the fields accumulated in earlier turns
2. Ask for exactly what is still missing
3. Search, then summarize the results (or explain the failure)

Every AI call has a canned fallback, so a dead LLM never blocks a search.
"""

from datetime import date
from typing import Optional, List, Sequence

from loguru import logger

from ..config import settings
from ..interfaces.flight_search import FlightSearchClient
from ..llm.param_extractor import FlightParamExtractor, param_extractor
from ..llm.prompts import (
    FLIGHT_SYSTEM_PROMPT,
    FLIGHT_HELP_PROMPT,
    FLIGHT_CLARIFICATION_PROMPT,
    FLIGHT_SEARCH_ERROR_PROMPT,
    FLIGHT_RESULTS_PROMPT,
)
from ..llm.text_generator import TextGenerator
from ..schemas.chat_schemas import (
    ConversationTurn,
    FlightAgentResult,
    FlightOption,
    FlightQueryParams,
)

TOP_RESULTS = 5

HELP_QUESTIONS = [
    "Where would you like to fly from?",
    "What's your destination?",
    "When would you like to travel?",
]

# One follow-up question per missing field label
MISSING_FIELD_QUESTIONS = {
    "departure city/airport": "Where are you flying from?",
    "arrival city/airport": "Where would you like to fly to?",
    "departure date": "What's your departure date?",
}

HELP_FALLBACK = (
    "I'd love to help you find flights! Could you tell me:\n"
    "- Where you're flying from\n"
    "- Your destination\n"
    "- Your travel dates"
)
SEARCH_ERROR_FALLBACK = "I encountered an issue with the flight search. Could you try different dates or airports?"


def describe_query(params: FlightQueryParams) -> List[str]:
    details = []
    if params.departure_id:
        details.append(f"From: {params.departure_id}")
    if params.arrival_id:
        details.append(f"To: {params.arrival_id}")
    if params.outbound_date:
        details.append(f"Departure: {params.outbound_date}")
    if params.return_date:
        details.append(f"Return: {params.return_date}")
    return details


def format_flight_results(flights: Sequence[FlightOption], limit: int = TOP_RESULTS) -> str:
    lines = []
    for index, flight in enumerate(flights[:limit], start=1):
        price = f"{flight.price.currency} {flight.price.amount:,.0f}" if flight.price.amount else "Price N/A"
        duration = f"{flight.duration} min" if flight.duration.isdigit() else flight.duration
        stops = "Nonstop" if flight.stops == 0 else f"{flight.stops} stop(s)"
        lines.append(f"Flight {index}: {flight.airline} - {price}, {duration}, {stops}")
    return "\n".join(lines)


def _with_history(message: str, history: Optional[Sequence[ConversationTurn]]) -> str:
    """Prefix the recent turns so the LLM can resolve "there", "that day", ..."""
    if not history:
        return message
    recent = history[-settings.HISTORY_WINDOW:]
    transcript = "\n".join(f"{turn.role}: {turn.message}" for turn in recent)
    return f"Previous conversation:\n{transcript}\n\nCurrent message: {message}"


class FlightAgent:
    """Stateless per call; the router owns the accumulated query"""

    def __init__(
        self,
        text_generator: TextGenerator,
        search_client: FlightSearchClient,
        extractor: Optional[FlightParamExtractor] = None,
    ):
        self.text_generator = text_generator
        self.search_client = search_client
        self.extractor = extractor or param_extractor

    async def process(
        self,
        message: str,
        history: Optional[Sequence[ConversationTurn]] = None,
        accumulated: Optional[FlightQueryParams] = None,
        today: Optional[date] = None,
    ) -> FlightAgentResult:
        current = self.extractor.extract_partial(message, today)
        query = (accumulated or FlightQueryParams()).merge(current)
        user_message = _with_history(message, history)

        # Nothing usable yet
        if query.is_empty():
            reply = await self.text_generator.complete_or(
                FLIGHT_HELP_PROMPT.format(user_message=user_message),
                fallback=HELP_FALLBACK,
                system_prompt=FLIGHT_SYSTEM_PROMPT,
            )
            return FlightAgentResult(
                message=reply,
                requires_more_info=True,
                suggested_questions=list(HELP_QUESTIONS),
                missing_fields=query.missing_fields(),
            )

        missing = query.missing_fields()
        if missing:
            logger.info(f"Flight query incomplete, asking for: {missing}")
            reply = await self.text_generator.complete_or(
                FLIGHT_CLARIFICATION_PROMPT.format(
                    user_message=user_message,
                    understood="\n".join(describe_query(query)),
                    missing=", ".join(missing),
                ),
                fallback=f"I need a bit more information: {' and '.join(missing)}. Could you provide that?",
                system_prompt=FLIGHT_SYSTEM_PROMPT,
            )
            return FlightAgentResult(
                message=reply,
                search_params=query.to_dict(),
                requires_more_info=True,
                suggested_questions=[MISSING_FIELD_QUESTIONS[label] for label in missing],
                missing_fields=missing,
                context_updates=query.to_context(),
            )

        trip_type = query.trip_type
        result = await self.search_client.search_flights(query)

        if not result.success:
            reply = await self.text_generator.complete_or(
                FLIGHT_SEARCH_ERROR_PROMPT.format(
                    user_message=message,
                    trip_type=trip_type,
                    search_details="\n".join(describe_query(query)),
                    error=result.error or "Unknown error",
                ),
                fallback=SEARCH_ERROR_FALLBACK,
                system_prompt=FLIGHT_SYSTEM_PROMPT,
            )
            return FlightAgentResult(
                message=reply,
                search_params=query.to_dict(),
                trip_type=trip_type,
                requires_more_info=True,
                context_updates=query.to_context(),
            )

        if not result.flights:
            returning = f" returning {query.return_date}" if query.return_date else ""
            return FlightAgentResult(
                message=(
                    f"I searched for flights from {query.departure_id} to {query.arrival_id} "
                    f"on {query.outbound_date}{returning}, but no flights were available. "
                    "You may want to try different dates or nearby airports."
                ),
                flight_data={"flights": [], "total_results": 0, "trip_type": trip_type},
                search_params=query.to_dict(),
                trip_type=trip_type,
                context_updates=query.to_context(),
            )

        summary = format_flight_results(result.flights)
        dates = f"Departure: {query.outbound_date}"
        dates += f"\nReturn: {query.return_date}" if query.return_date else " (One-way)"
        reply = await self.text_generator.complete_or(
            FLIGHT_RESULTS_PROMPT.format(
                user_message=message,
                trip_type=trip_type,
                flight_summary=summary,
                route=f"{query.departure_id} → {query.arrival_id}",
                dates=dates,
            ),
            fallback=summary,
            system_prompt=FLIGHT_SYSTEM_PROMPT,
        )

        return FlightAgentResult(
            message=reply,
            flight_data={
                "flights": [flight.model_dump() for flight in result.flights],
                "total_results": len(result.flights),
                "trip_type": trip_type,
                "google_flights_url": result.google_flights_url,
                "search_params": query.to_dict(),
            },
            search_params=query.to_dict(),
            trip_type=trip_type,
            context_updates=query.to_context(),
        )
