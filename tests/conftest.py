"""Shared fixtures: offline text generator, canned flight search, in-memory app."""

from datetime import date
from typing import Callable, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from flightmate.api.deps import build_services
from flightmate.interfaces.flight_search import FlightSearchClient
from flightmate.interfaces.session_context_store import SessionContextStore
from flightmate.llm.text_generator import GenerationError, TextGenerator
from flightmate.main import create_app
from flightmate.schemas.chat_schemas import (
    FlightEndpoint,
    FlightOption,
    FlightPrice,
    FlightQueryParams,
    FlightSearchResult,
)

TODAY = date(2025, 10, 1)


class ScriptedTextGenerator(TextGenerator):
    """
    Never touches the network. With no reply configured every call fails,
    which exercises the canned fallbacks.
    """

    def __init__(self, reply: Union[None, str, Callable[[str], str]] = None):
        super().__init__(openai_api_key="")
        self.reply = reply
        self.prompts: List[str] = []

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.reply is None:
            raise GenerationError("offline")
        text = self.reply(prompt) if callable(self.reply) else self.reply
        if not text:
            raise GenerationError("empty")
        return text


class FakeSearchClient(FlightSearchClient):
    """Returns a preset result and records every query it was asked for"""

    def __init__(self, result: Optional[FlightSearchResult] = None, error: Optional[Exception] = None):
        super().__init__(api_key="test-key")
        self.result = result or FlightSearchResult(success=True, flights=[sample_flight()])
        self.error = error
        self.queries: List[FlightQueryParams] = []

    async def search_flights(self, params: FlightQueryParams) -> FlightSearchResult:
        self.queries.append(params)
        if self.error is not None:
            raise self.error
        return self.result


def sample_flight(airline: str = "Emirates", amount: float = 450, stops: int = 0) -> FlightOption:
    return FlightOption(
        airline=airline,
        departure=FlightEndpoint(airport="Chhatrapati Shivaji International", time="2025-10-18 09:00", date="2025-10-18"),
        arrival=FlightEndpoint(airport="Dubai International", time="2025-10-18 10:30", date="2025-10-18"),
        duration="210",
        price=FlightPrice(amount=amount, currency="USD"),
        stops=stops,
    )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def text_generator() -> ScriptedTextGenerator:
    return ScriptedTextGenerator()


@pytest.fixture
def search_client() -> FakeSearchClient:
    return FakeSearchClient()


@pytest.fixture
def context_store() -> SessionContextStore:
    return SessionContextStore()


@pytest.fixture
def services(text_generator, search_client):
    return build_services(db=None, text_generator=text_generator, search_client=search_client)


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services))


def register(client: TestClient, email: str = "asha@example.com", password: str = "secret123") -> dict:
    response = client.post(
        "/api/auth/register",
        json={"email": email, "username": email.split("@")[0], "password": password},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client) -> dict:
    return register(client)
