"""
Airport Lookup Utilities
Static city -> IATA table shared by the extractor, scorer and route guard
"""

import re
from typing import Dict, List, NamedTuple, Optional

CITY_AIRPORTS: Dict[str, str] = {
    # India
    "mumbai": "BOM", "delhi": "DEL", "new delhi": "DEL", "bangalore": "BLR",
    "bengaluru": "BLR", "kolkata": "CCU", "chennai": "MAA", "hyderabad": "HYD",
    "ahmedabad": "AMD", "pune": "PNQ", "goa": "GOI", "jaipur": "JAI",
    "lucknow": "LKO", "kochi": "COK", "cochin": "COK", "thiruvananthapuram": "TRV",
    "trivandrum": "TRV", "chandigarh": "IXC", "coimbatore": "CJB",
    "vadodara": "BDQ", "baroda": "BDQ", "indore": "IDR", "nagpur": "NAG",
    "surat": "STV", "visakhapatnam": "VTZ", "bhubaneswar": "BBI", "patna": "PAT",
    "ranchi": "IXR", "udaipur": "UDR", "amritsar": "ATQ", "srinagar": "SXR",
    "guwahati": "GAU", "imphal": "IMF", "agartala": "IXA", "varanasi": "VNS",

    # China
    "beijing": "PEK", "shanghai": "PVG", "guangzhou": "CAN", "shenzhen": "SZX",
    "chengdu": "CTU", "hangzhou": "HGH", "xi'an": "XIY", "xian": "XIY",

    # Europe
    "london": "LHR", "paris": "CDG", "frankfurt": "FRA", "amsterdam": "AMS",
    "madrid": "MAD", "rome": "FCO", "barcelona": "BCN", "berlin": "BER",
    "istanbul": "IST", "moscow": "SVO", "dublin": "DUB", "vienna": "VIE",
    "zurich": "ZRH", "geneva": "GVA", "brussels": "BRU", "copenhagen": "CPH",

    # United States
    "new york": "JFK", "los angeles": "LAX", "chicago": "ORD", "miami": "MIA",
    "austin": "AUS", "dallas": "DFW", "houston": "IAH", "atlanta": "ATL",
    "san francisco": "SFO", "seattle": "SEA", "boston": "BOS", "washington": "IAD",
    "las vegas": "LAS", "orlando": "MCO", "phoenix": "PHX", "denver": "DEN",

    # Canada
    "toronto": "YYZ", "vancouver": "YVR", "montreal": "YUL", "calgary": "YYC",

    # Australia
    "sydney": "SYD", "melbourne": "MEL", "brisbane": "BNE", "perth": "PER",

    # Rest of Asia / Middle East
    "tokyo": "NRT", "seoul": "ICN", "singapore": "SIN", "hong kong": "HKG",
    "dubai": "DXB", "bangkok": "BKK", "kuala lumpur": "KUL", "jakarta": "CGK",
    "manila": "MNL", "taipei": "TPE", "ho chi minh": "SGN", "saigon": "SGN",
    "hanoi": "HAN", "kathmandu": "KTM", "dhaka": "DAC", "colombo": "CMB",
    "karachi": "KHI", "lahore": "LHE", "islamabad": "ISB",
}

KNOWN_AIRPORT_CODES = frozenset(CITY_AIRPORTS.values())

# Longest names first so "new delhi" wins over "delhi"
CITY_PATTERN = r"(?:" + "|".join(
    re.escape(city) for city in sorted(CITY_AIRPORTS, key=len, reverse=True)
) + r")"

_CITY_REGEX = re.compile(rf"\b{CITY_PATTERN}\b", re.IGNORECASE)


class CityMention(NamedTuple):
    position: int
    city: str
    code: str


def find_city_mentions(text: str) -> List[CityMention]:
    """All known city names in `text`, in order of appearance"""
    return [
        CityMention(m.start(), m.group(0).lower(), CITY_AIRPORTS[m.group(0).lower()])
        for m in _CITY_REGEX.finditer(text)
    ]


def has_city_mention(text: str) -> bool:
    return _CITY_REGEX.search(text) is not None


def lookup_airport(phrase: str, allow_containment: bool = True) -> Optional[str]:
    """
    Resolve a free-form place phrase to an IATA code.

    Tolerates partial names: an exact city wins, then the longest table
    city contained in the phrase, then a table city starting with the
    phrase, then a table city containing the phrase as whole words
    ("vegas" -> "las vegas"). The last two need 3+ letters. A phrase that
    is already a known code is accepted.
    """
    phrase = " ".join(phrase.lower().strip(" .,'").split())
    if not phrase:
        return None

    if phrase in CITY_AIRPORTS:
        return CITY_AIRPORTS[phrase]

    if phrase.upper() in KNOWN_AIRPORT_CODES:
        return phrase.upper()

    if allow_containment:
        contained = [city for city in CITY_AIRPORTS if re.search(rf"\b{re.escape(city)}\b", phrase)]
        if contained:
            return CITY_AIRPORTS[max(contained, key=len)]

    if len(phrase) >= 3:
        for city, code in CITY_AIRPORTS.items():
            if city.startswith(phrase):
                return code

        inner = re.compile(rf"\b{re.escape(phrase)}\b")
        for city, code in CITY_AIRPORTS.items():
            if inner.search(city):
                return code

    return None
