"""
Utilities Module
Airport lookup, auth helpers and text formatting
"""

from .airports import find_city_mentions, has_city_mention, lookup_airport
from .text_helpers import clean_title, truncate

__all__ = [
    "find_city_mentions",
    "has_city_mention",
    "lookup_airport",
    "clean_title",
    "truncate",
]
