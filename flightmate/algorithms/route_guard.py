"""
Multi-Route Guard
Catches messages that ask for several flight routes at once
("Mumbai to Dubai, also Delhi to London") before any scoring happens.

Fires when:
- three or more distinct routes are mentioned, or
- two or more routes appear together with multi-query language
  ("also", "additionally", "first ... second", ...)
"""

import re
from typing import List, NamedTuple

from loguru import logger

from ..llm.param_extractor import CODE_STOPLIST, SUPPORTED_CURRENCIES
from ..utils.airports import CITY_AIRPORTS, CITY_PATTERN

MIN_ROUTES_ALONE = 3
MIN_ROUTES_WITH_LANGUAGE = 2

_PLACE = rf"\b(?i:{CITY_PATTERN})\b|\b[A-Z]{{3}}\b"

# Destination sits in a lookahead so chained routes ("A to B to C") overlap
ROUTE_RE = re.compile(
    rf"(?P<src>{_PLACE})(?:\s+(?i:to)\s+|\s*(?:->|→)\s*)(?=(?P<dst>{_PLACE}))"
)

MULTI_QUERY_PATTERNS = [
    r"\balso\b",
    r"\badditionally\b",
    r"\bas\s+well\b",
    r"\band\s+then\b",
    r"\banother\s+(?:flight|trip|route|one)\b",
    r"\bfirst\b.*\bsecond\b",
    r"\b(?:multiple|several|both)\s+(?:flights|routes|trips)\b",
    r"\bplus\b",
]
MULTI_QUERY_RE = re.compile("|".join(MULTI_QUERY_PATTERNS), re.IGNORECASE | re.DOTALL)


class Route(NamedTuple):
    origin: str
    departure_id: str
    destination: str
    arrival_id: str

    def to_dict(self):
        return self._asdict()


class RouteGuardResult(NamedTuple):
    routes: List[Route]
    has_multi_query_language: bool

    @property
    def triggered(self) -> bool:
        count = len(self.routes)
        if count >= MIN_ROUTES_ALONE:
            return True
        return count >= MIN_ROUTES_WITH_LANGUAGE and self.has_multi_query_language


def _place_code(place: str) -> str:
    return CITY_AIRPORTS.get(place.lower(), place.upper())


def _is_place(place: str) -> bool:
    return place.lower() in CITY_AIRPORTS or place not in CODE_STOPLIST | set(SUPPORTED_CURRENCIES)


def detect_routes(text: str) -> List[Route]:
    """Distinct (departure, arrival) pairs in order of appearance"""
    routes: List[Route] = []
    seen = set()
    for match in ROUTE_RE.finditer(text or ""):
        src, dst = match.group("src"), match.group("dst")
        if not (_is_place(src) and _is_place(dst)):
            continue
        key = (_place_code(src), _place_code(dst))
        if key[0] == key[1] or key in seen:
            continue
        seen.add(key)
        routes.append(Route(src, key[0], dst, key[1]))
    return routes


def detect_multi_route_request(text: str) -> RouteGuardResult:
    result = RouteGuardResult(
        routes=detect_routes(text),
        has_multi_query_language=bool(MULTI_QUERY_RE.search(text or "")),
    )
    if result.triggered:
        logger.info(f"Multi-route request detected: {[(r.departure_id, r.arrival_id) for r in result.routes]}")
    return result


def _display(place: str) -> str:
    return place.title() if place.lower() in CITY_AIRPORTS else place.upper()


def build_clarification_message(routes: List[Route]) -> str:
    lines = [
        f"{index}. {_display(route.origin)} ({route.departure_id}) → {_display(route.destination)} ({route.arrival_id})"
        for index, route in enumerate(routes, start=1)
    ]
    return (
        "It looks like you're asking about several flight routes at once:\n"
        + "\n".join(lines)
        + "\n\nI can search one route at a time. Which one would you like me to look up first? "
        "Please include the travel date too."
    )
