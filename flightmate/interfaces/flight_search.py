"""
Flight Search Client
Queries the SerpAPI google_flights engine and normalizes its results.

Every failure (missing key, HTTP error, network error, API error field)
comes back as FlightSearchResult(success=False, error=...); nothing raises.
"""

import re
from typing import Optional, Dict, Any, List
from urllib.parse import quote

import httpx
from loguru import logger

from ..config import settings
from ..schemas.chat_schemas import (
    FlightQueryParams,
    FlightSearchResult,
    FlightOption,
    FlightEndpoint,
    FlightPrice,
    Layover,
)

ROUND_TRIP = 1
ONE_WAY = 2

RESULT_SECTIONS = ("best_flights", "other_flights", "flights")

PRICE_SYMBOLS = (
    ("₹", "INR"), ("INR", "INR"),
    ("€", "EUR"), ("EUR", "EUR"),
    ("£", "GBP"), ("GBP", "GBP"),
    ("$", "USD"), ("USD", "USD"),
)


def build_google_flights_url(params: FlightQueryParams) -> str:
    query = f"Flights from {params.departure_id} to {params.arrival_id} on {params.outbound_date}"
    if params.return_date:
        query += f" returning {params.return_date}"
    return f"https://www.google.com/travel/flights?q={quote(query)}"


class FlightSearchClient:
    """Async SerpAPI client; one short-lived httpx client per search"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.SERP_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.SERP_API_URL
        self.timeout = timeout or settings.FLIGHT_SEARCH_TIMEOUT
        self.transport = transport

    def build_request_params(self, params: FlightQueryParams) -> Dict[str, Any]:
        """Round trips send type=1 plus return_date; one-way sends type=2 and never a return_date"""
        request = {
            "engine": "google_flights",
            "departure_id": params.departure_id,
            "arrival_id": params.arrival_id,
            "outbound_date": params.outbound_date,
            "currency": params.currency or "USD",
            "hl": params.language_hint or "en",
            "adults": 1,
            "api_key": self.api_key,
        }
        if params.return_date:
            request["type"] = ROUND_TRIP
            request["return_date"] = params.return_date
        else:
            request["type"] = ONE_WAY
        return request

    async def search_flights(self, params: FlightQueryParams) -> FlightSearchResult:
        if not self.api_key:
            logger.error("Flight search unavailable: SERP_API_KEY is not configured")
            return FlightSearchResult(success=False, error="Flight search is not configured (missing API key)")

        if not params.is_complete():
            return FlightSearchResult(
                success=False,
                error=f"Missing search parameters: {', '.join(params.missing_fields())}",
            )

        request = self.build_request_params(params)
        logger.info(
            f"Searching flights {params.departure_id}->{params.arrival_id} "
            f"{params.outbound_date} ({params.trip_type})"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.base_url, params=request)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            error = _error_field(e.response) or f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            logger.error(f"SerpAPI HTTP error: {error}")
            return FlightSearchResult(success=False, error=error)
        except httpx.RequestError as e:
            logger.error(f"SerpAPI network error: {e}")
            return FlightSearchResult(success=False, error="Network error: Unable to reach flight search service")
        except ValueError as e:
            logger.error(f"SerpAPI returned invalid JSON: {e}")
            return FlightSearchResult(success=False, error="Flight search returned an unreadable response")

        if data.get("error"):
            logger.error(f"SerpAPI error: {data['error']}")
            return FlightSearchResult(success=False, error=str(data["error"]))

        flights = parse_flights(data)
        logger.info(f"Flight search returned {len(flights)} options")
        return FlightSearchResult(
            success=True,
            flights=flights,
            google_flights_url=build_google_flights_url(params),
        )


def _error_field(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error") if isinstance(body, dict) else None


# ============================================
# Response parsing
# ============================================

def parse_flights(data: Dict[str, Any]) -> List[FlightOption]:
    """Options from the first non-empty result section; unknown airlines are dropped"""
    raw_options: List[Dict[str, Any]] = []
    for section in RESULT_SECTIONS:
        if isinstance(data.get(section), list) and data[section]:
            raw_options = data[section]
            break

    flights = []
    for raw in raw_options:
        airline = _extract_airline(raw)
        if airline == "Unknown":
            continue
        layovers = raw.get("layovers") if isinstance(raw.get("layovers"), list) else None
        flights.append(FlightOption(
            airline=airline,
            departure=_extract_endpoint(raw, "departure_airport", first=True),
            arrival=_extract_endpoint(raw, "arrival_airport", first=False),
            duration=_extract_duration(raw),
            price=_extract_price(raw),
            stops=len(layovers) if layovers else _extract_stops(raw),
            layovers=[Layover(**_layover_fields(stop)) for stop in layovers] if layovers else None,
            booking_link=raw.get("booking_link") or raw.get("link"),
        ))
    return flights


def _extract_airline(raw: Dict[str, Any]) -> str:
    segments = raw.get("flights")
    if isinstance(segments, list) and segments:
        airlines = []
        for segment in segments:
            name = segment.get("airline")
            if isinstance(name, str) and name and name not in airlines:
                airlines.append(name)
        if airlines:
            return " + ".join(airlines)

    for key in ("airline", "airline_name", "carrier"):
        if isinstance(raw.get(key), str) and raw[key]:
            return raw[key]
    return "Unknown"


def _extract_endpoint(raw: Dict[str, Any], key: str, first: bool) -> FlightEndpoint:
    segments = raw.get("flights")
    source = raw
    if isinstance(segments, list) and segments:
        source = segments[0] if first else segments[-1]

    airport = source.get(key) or {}
    if not isinstance(airport, dict):
        return FlightEndpoint()

    time = airport.get("time") or "Unknown"
    return FlightEndpoint(
        airport=airport.get("name") or airport.get("id") or "Unknown",
        time=time,
        date=time.split(" ")[0] if time != "Unknown" else "Unknown",
    )


def _extract_price(raw: Dict[str, Any]) -> FlightPrice:
    price = raw.get("price")
    if isinstance(price, (int, float)):
        return FlightPrice(amount=price)

    if isinstance(price, str):
        currency = next((code for symbol, code in PRICE_SYMBOLS if symbol in price), "USD")
        match = re.search(r"[\d,]+(?:\.\d+)?", price)
        amount = float(match.group(0).replace(",", "")) if match else 0
        return FlightPrice(amount=amount, currency=currency)

    if isinstance(price, dict):
        return FlightPrice(
            amount=price.get("amount") or price.get("value") or 0,
            currency=price.get("currency") or "USD",
        )

    return FlightPrice()


def _extract_duration(raw: Dict[str, Any]) -> str:
    duration = raw.get("total_duration") or raw.get("duration")
    return str(duration) if duration else "Unknown"


def _extract_stops(raw: Dict[str, Any]) -> int:
    stops = raw.get("stops")
    if isinstance(stops, int):
        return stops
    if isinstance(stops, str):
        match = re.search(r"\d+", stops)
        return int(match.group(0)) if match else 0
    segments = raw.get("flights")
    if isinstance(segments, list) and segments:
        return len(segments) - 1
    return 0


def _layover_fields(layover: Dict[str, Any]) -> Dict[str, Any]:
    return {key: layover.get(key) for key in ("duration", "name", "id", "overnight")}
