"""Tests for the flight assistant."""

import pytest

from flightmate.agents.flight_agent import (
    HELP_FALLBACK,
    HELP_QUESTIONS,
    SEARCH_ERROR_FALLBACK,
    FlightAgent,
    format_flight_results,
)
from flightmate.schemas.chat_schemas import ConversationTurn, FlightQueryParams, FlightSearchResult

from conftest import TODAY, FakeSearchClient, ScriptedTextGenerator, sample_flight


def make_agent(reply=None, result=None):
    search = FakeSearchClient(result=result)
    return FlightAgent(ScriptedTextGenerator(reply), search), search


class TestFormatResults:
    def test_one_line_per_flight(self):
        text = format_flight_results([sample_flight(), sample_flight("IndiGo", 12500, stops=1)])
        assert text.splitlines() == [
            "Flight 1: Emirates - USD 450, 210 min, Nonstop",
            "Flight 2: IndiGo - USD 12,500, 210 min, 1 stop(s)",
        ]

    def test_limit(self):
        text = format_flight_results([sample_flight()] * 8, limit=5)
        assert len(text.splitlines()) == 5


class TestFlightAgent:
    @pytest.mark.asyncio
    async def test_no_flight_details_asks_for_everything(self):
        agent, search = make_agent()
        result = await agent.process("I want to travel somewhere", today=TODAY)
        assert result.message == HELP_FALLBACK
        assert result.requires_more_info
        assert result.suggested_questions == HELP_QUESTIONS
        assert search.queries == []

    @pytest.mark.asyncio
    async def test_missing_date(self):
        agent, search = make_agent()
        result = await agent.process("Find flights from Mumbai to Dubai", today=TODAY)
        assert result.missing_fields == ["departure date"]
        assert result.message == "I need a bit more information: departure date. Could you provide that?"
        assert result.suggested_questions == ["What's your departure date?"]
        assert result.context_updates == {"flight_departure_id": "BOM", "flight_arrival_id": "DXB"}
        assert search.queries == []

    @pytest.mark.asyncio
    async def test_accumulated_fields_complete_the_query(self):
        agent, search = make_agent()
        accumulated = FlightQueryParams(departure_id="BOM", arrival_id="DXB")
        result = await agent.process("Oct 18", accumulated=accumulated, today=TODAY)
        assert search.queries == [FlightQueryParams(departure_id="BOM", arrival_id="DXB", outbound_date="2025-10-18")]
        assert result.trip_type == "one-way"
        assert result.flight_data["total_results"] == 1
        assert not result.requires_more_info

    @pytest.mark.asyncio
    async def test_newer_fields_override_accumulated(self):
        agent, search = make_agent()
        accumulated = FlightQueryParams(departure_id="BOM", arrival_id="DXB", outbound_date="2025-10-18")
        await agent.process("Actually make it from Delhi to London", accumulated=accumulated, today=TODAY)
        assert (search.queries[0].departure_id, search.queries[0].arrival_id) == ("DEL", "LHR")
        assert search.queries[0].outbound_date == "2025-10-18"

    @pytest.mark.asyncio
    async def test_results_fall_back_to_plain_summary(self):
        agent, _ = make_agent()
        result = await agent.process("Flights from PEK to AUS on 2025-10-18 returning 2025-10-24", today=TODAY)
        assert result.message == "Flight 1: Emirates - USD 450, 210 min, Nonstop"
        assert result.trip_type == "round-trip"
        assert result.search_params["return_date"] == "2025-10-24"
        assert result.flight_data["flights"][0]["airline"] == "Emirates"

    @pytest.mark.asyncio
    async def test_results_summarized_by_llm(self):
        agent, _ = make_agent(reply="Emirates has a nonstop for $450.")
        history = [ConversationTurn("user", "Hi"), ConversationTurn("assistant", "Hello!")]
        result = await agent.process("Flights from PEK to AUS on 2025-10-18", history=history, today=TODAY)
        assert result.message == "Emirates has a nonstop for $450."

    @pytest.mark.asyncio
    async def test_no_results(self):
        agent, _ = make_agent(result=FlightSearchResult(success=True, flights=[]))
        result = await agent.process("Flights from PEK to AUS on 2025-10-18", today=TODAY)
        assert "no flights were available" in result.message
        assert result.flight_data == {"flights": [], "total_results": 0, "trip_type": "one-way"}

    @pytest.mark.asyncio
    async def test_search_error(self):
        agent, _ = make_agent(result=FlightSearchResult(success=False, error="Invalid API key."))
        result = await agent.process("Flights from PEK to AUS on 2025-10-18", today=TODAY)
        assert result.message == SEARCH_ERROR_FALLBACK
        assert result.requires_more_info
        assert result.search_params["departure_id"] == "PEK"
