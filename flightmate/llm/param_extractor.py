# llm/param_extractor.py
"""
Flight Parameter Extractor
Turns a free-text message into a structured flight query:
- Departure / arrival airports (IATA codes, "from X to Y", city names)
- Outbound and return dates (return keywords, relative, month names, numeric)
- Currency and result language hints
Rule-based and deterministic; "today" is injectable so results are testable.
"""

import re
from datetime import date, timedelta
from typing import Optional, List, Tuple

from loguru import logger

from ..schemas.chat_schemas import FlightQueryParams
from ..utils.airports import find_city_mentions, lookup_airport


# ============================================
# Date patterns
# ============================================

MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
ORDINAL = r"(?:st|nd|rd|th)?"

MONTH_NUMBERS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

MONTH_DATE_RE = re.compile(
    rf"\b(?:(?P<month_a>{MONTH})\.?\s+(?P<day_a>\d{{1,2}}){ORDINAL}"
    rf"|(?P<day_b>\d{{1,2}}){ORDINAL}\s+(?:of\s+)?(?P<month_b>{MONTH}))"
    r"(?:,?\s+(?P<year>\d{4}))?\b",
    re.IGNORECASE,
)

NUMERIC_DATE = (
    r"(?:\d{4}[-/]\d{1,2}[-/]\d{1,2}"
    r"|\d{1,2}[-/]\d{1,2}[-/](?:\d{4}|\d{2})"
    r"|\d{1,2}[-/]\d{1,2})"
)
NUMERIC_DATE_RE = re.compile(rf"\b{NUMERIC_DATE}\b")

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Checked longest-first so "day after tomorrow" is never read as "tomorrow"
RELATIVE_DAYS = {
    "day after tomorrow": 2,
    "tomorrow": 1,
    "today": 0,
    "next week": 7,
    "next month": 30,
}
RELATIVE_DATE = r"(?:day\s+after\s+tomorrow|tomorrow|today|next\s+week|next\s+month)"
RELATIVE_DATE_RE = re.compile(rf"\b{RELATIVE_DATE}\b", re.IGNORECASE)

# Any single date, in any supported format
DATE_TOKEN = (
    rf"(?:{RELATIVE_DATE}"
    rf"|{MONTH}\.?\s+\d{{1,2}}{ORDINAL}(?:,?\s+\d{{4}})?"
    rf"|\d{{1,2}}{ORDINAL}\s+(?:of\s+)?{MONTH}(?:,?\s+\d{{4}})?"
    rf"|{NUMERIC_DATE})"
)

RETURN_DATE_RE = re.compile(
    r"\b(?:returning|return(?:\s+date)?|com(?:e|ing)\s+back|back)"
    r"(?:\s+(?:on|is|date))?\s*:?\s*"
    rf"(?P<date>{DATE_TOKEN})\b",
    re.IGNORECASE,
)

DATE_LIKE_RE = re.compile(rf"\b(?:{NUMERIC_DATE}|{RELATIVE_DATE}|{MONTH}\.?\s+\d{{1,2}})\b", re.IGNORECASE)


# ============================================
# Location / misc patterns
# ============================================

IATA_TOKEN_RE = re.compile(r"\b[A-Z]{3}\b")

FROM_TO_RE = re.compile(
    r"\bfrom\s+(?P<src>[a-z][a-z\s'.]*?)\s+to\s+(?P<dst>[a-z][a-z\s'.]*?)"
    r"(?=\s+(?:on|in|at|for|next|this|tomorrow|today|returning|return|and|by|around|departing|leaving|with)\b"
    r"|\s+\d|[,!?;]|\.(?:\s|$)|$)"
)

SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF")
CURRENCY_RE = re.compile(rf"\b({'|'.join(SUPPORTED_CURRENCIES)})\b", re.IGNORECASE)

LANGUAGE_CODES = {
    "english": "en", "spanish": "es", "french": "fr", "german": "de", "italian": "it",
    "portuguese": "pt", "russian": "ru", "chinese": "zh", "japanese": "ja", "korean": "ko",
}
LANGUAGE_RE = re.compile(
    rf"\b(?:in|language\s*[:=]?)\s+({'|'.join(LANGUAGE_CODES)})\b",
    re.IGNORECASE,
)

# All-caps words that look like airport codes but never are
CODE_STOPLIST = frozenset({
    "THE", "AND", "FOR", "YOU", "ARE", "CAN", "NOT", "BUT", "ALL", "ANY", "HOW",
    "WHO", "WHY", "NEW", "ONE", "TWO", "OUT", "GET", "HAS", "HAD", "HIM", "HER",
    "ITS", "OUR", "WAS", "NOW", "SEE", "WAY", "DAY", "API", "ASAP", "PLZ", "PLS",
})


MONTH_WORD_RE = re.compile(rf"\b{MONTH}\b", re.IGNORECASE)


def looks_like_date(text: str) -> bool:
    """True if the text contains something date-shaped"""
    return DATE_LIKE_RE.search(text) is not None


def has_date_mention(text: str) -> bool:
    """Looser than looks_like_date: a bare month name also counts"""
    return looks_like_date(text) or MONTH_WORD_RE.search(text) is not None


# ============================================
# Date normalization
# ============================================

def _day_and_month(first: int, second: int) -> Tuple[int, int]:
    """Whichever part exceeds 12 is the day; otherwise the first part is"""
    if second > 12 >= first:
        return second, first
    return first, second


def normalize_date(raw: str, today: Optional[date] = None) -> Optional[str]:
    """
    Normalize a numeric date string to YYYY-MM-DD.

    ISO input is returned unchanged. Two-part dates assume the current year
    and roll forward a year if already past; explicit years are never rolled.
    Impossible calendar dates return None.
    """
    if not raw:
        return None
    raw = raw.strip()
    today = today or date.today()

    if ISO_DATE_RE.match(raw):
        try:
            date.fromisoformat(raw)
        except ValueError:
            return None
        return raw

    parts = re.split(r"[-/]", raw)
    if not all(part.isdigit() for part in parts):
        return None

    try:
        if len(parts) == 2:
            day, month = _day_and_month(int(parts[0]), int(parts[1]))
            resolved = date(today.year, month, day)
            if resolved < today:
                resolved = resolved.replace(year=today.year + 1)
            return resolved.isoformat()

        if len(parts) == 3:
            if len(parts[0]) == 4:
                year, month, day = int(parts[0]), int(parts[1]), int(parts[2])
            else:
                day, month = _day_and_month(int(parts[0]), int(parts[1]))
                year = int(parts[2])
                if year < 100:
                    year += 2000
            return date(year, month, day).isoformat()
    except ValueError:
        return None

    return None


def _resolve_month_day(month_token: str, day: int, year: Optional[int], today: date) -> Optional[str]:
    """Month-name dates resolve to the next occurrence unless a year is given"""
    month = MONTH_NUMBERS[month_token[:3].lower()]
    try:
        if year:
            return date(year, month, day).isoformat()
        resolved = date(today.year, month, day)
        if resolved < today:
            resolved = date(today.year + 1, month, day)
        return resolved.isoformat()
    except ValueError:
        return None


def _resolve_month_match(match: "re.Match", today: date) -> Optional[str]:
    month_token = match.group("month_a") or match.group("month_b")
    day = int(match.group("day_a") or match.group("day_b"))
    year = int(match.group("year")) if match.group("year") else None
    return _resolve_month_day(month_token, day, year, today)


def _resolve_relative(phrase: str, today: date) -> str:
    offset = RELATIVE_DAYS[" ".join(phrase.lower().split())]
    return (today + timedelta(days=offset)).isoformat()


# ============================================
# Extractor
# ============================================

class FlightParamExtractor:
    """
    Extracts flight search parameters from natural language.
    Rule-based: every strategy is a regex pass over the message.
    """

    def extract(self, text: str, today: Optional[date] = None) -> Optional[FlightQueryParams]:
        """
        Extract a complete flight query.

        Returns None when departure, arrival or outbound date cannot be
        resolved; that means "not enough information", not an error.
        """
        params = self._extract(text, today, partial=False)
        if not params.is_complete():
            logger.debug(f"Extractor: incomplete query, missing {params.missing_fields()}")
            return None
        return params

    def extract_partial(self, text: str, today: Optional[date] = None) -> FlightQueryParams:
        """Extract whatever flight fields the message supplies"""
        return self._extract(text, today, partial=True)

    def _extract(self, text: str, today: Optional[date], partial: bool) -> FlightQueryParams:
        text = text or ""
        today = today or date.today()

        outbound_date, return_date = self._extract_dates(text, today)
        departure_id, arrival_id = self._extract_locations(text, partial)

        params = FlightQueryParams(
            departure_id=departure_id,
            arrival_id=arrival_id,
            outbound_date=outbound_date,
            return_date=return_date,
            currency=self._extract_currency(text),
            language_hint=self._extract_language(text),
        )

        logger.debug(
            f"Extracted flight params: {params.departure_id}->{params.arrival_id}, "
            f"dates={params.outbound_date}/{params.return_date}, currency={params.currency}"
        )
        return params

    # ---------- dates ----------

    def _extract_dates(self, text: str, today: date) -> Tuple[Optional[str], Optional[str]]:
        """Outbound and return dates; the first strategy that yields anything wins"""
        return_date = None

        return_match = RETURN_DATE_RE.search(text)
        if return_match:
            return_date = self._parse_date_token(return_match.group("date"), today)
            start, end = return_match.span()
            text = text[:start] + " " * (end - start) + text[end:]

        found: List[str] = []
        for strategy in (self._relative_dates, self._month_name_dates, self._numeric_dates):
            found = strategy(text, today)
            if found:
                break

        outbound_date = found[0] if found else None
        if return_date is None and len(found) > 1:
            return_date = found[1]

        return outbound_date, return_date

    def _parse_date_token(self, token: str, today: date) -> Optional[str]:
        """Resolve a single date written in any supported format"""
        token = token.strip()
        if RELATIVE_DATE_RE.fullmatch(token):
            return _resolve_relative(token, today)
        month_match = MONTH_DATE_RE.fullmatch(token)
        if month_match:
            return _resolve_month_match(month_match, today)
        return normalize_date(token, today)

    def _relative_dates(self, text: str, today: date) -> List[str]:
        return [_resolve_relative(m.group(0), today) for m in RELATIVE_DATE_RE.finditer(text)]

    def _month_name_dates(self, text: str, today: date) -> List[str]:
        resolved = (_resolve_month_match(m, today) for m in MONTH_DATE_RE.finditer(text))
        return [value for value in resolved if value]

    def _numeric_dates(self, text: str, today: date) -> List[str]:
        resolved = (normalize_date(m.group(0), today) for m in NUMERIC_DATE_RE.finditer(text))
        return [value for value in resolved if value]

    # ---------- locations ----------

    def _extract_locations(self, text: str, partial: bool) -> Tuple[Optional[str], Optional[str]]:
        codes = self._iata_tokens(text)
        if len(codes) >= 2:
            return codes[0], codes[1]

        lowered = text.lower()
        phrase = FROM_TO_RE.search(lowered)
        if phrase:
            departure = lookup_airport(phrase.group("src"))
            arrival = lookup_airport(phrase.group("dst"))
            if departure and arrival and departure != arrival:
                return departure, arrival

        airports: List[str] = []
        for mention in find_city_mentions(text):
            if mention.code not in airports:
                airports.append(mention.code)
        if len(airports) >= 2:
            return airports[0], airports[1]

        if not partial:
            return None, None

        return self._airport_after("from", lowered), self._airport_after("to", lowered)

    def _iata_tokens(self, text: str) -> List[str]:
        return [
            token for token in IATA_TOKEN_RE.findall(text)
            if token not in CODE_STOPLIST and token not in SUPPORTED_CURRENCIES
        ]

    def _airport_after(self, keyword: str, lowered: str) -> Optional[str]:
        """Airport named right after a lone "from"/"to", trying 3, 2, then 1 words"""
        pattern = rf"\b{keyword}\s+(?=([a-z][a-z'.]*(?:\s+[a-z][a-z'.]*){{0,2}}))"
        for match in re.finditer(pattern, lowered):
            words = match.group(1).split()
            for size in range(len(words), 0, -1):
                code = lookup_airport(" ".join(words[:size]), allow_containment=False)
                if code:
                    return code
        return None

    # ---------- currency / language ----------

    def _extract_currency(self, text: str) -> Optional[str]:
        match = CURRENCY_RE.search(text)
        return match.group(1).upper() if match else None

    def _extract_language(self, text: str) -> Optional[str]:
        match = LANGUAGE_RE.search(text)
        return LANGUAGE_CODES[match.group(1).lower()] if match else None


# ============================================
# Global Instance
# ============================================

param_extractor = FlightParamExtractor()


# ============================================
# Convenience Functions
# ============================================

def extract_flight_params(text: str, today: Optional[date] = None) -> Optional[FlightQueryParams]:
    """Complete flight query from text, or None"""
    return param_extractor.extract(text, today)


def extract_partial_flight_params(text: str, today: Optional[date] = None) -> FlightQueryParams:
    """Whatever flight fields the text supplies"""
    return param_extractor.extract_partial(text, today)
