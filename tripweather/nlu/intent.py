from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .aliases import DEFAULT_ALIASES

WEATHER_KEYWORDS = ("weather", "temp", "temperature", "forecast", "climate")
DAY_WORDS = ("today", "tomorrow")

# Substring match, so "temperatures" and "forecasting" also count.
_KEYWORD_RE = re.compile("|".join(WEATHER_KEYWORDS), flags=re.IGNORECASE)

# Characters a location phrase may contain. The phrase ends at the first
# character outside this class ("?", ".", digits, other punctuation).
LOCATION_CHARS = r"A-Za-z\s,'\-"

# First "in"/"at"/"for" that is not directly followed by a day word.
_LOCATION_RE = re.compile(
    rf"\b(?:in|at|for)\s+(?!(?:{'|'.join(DAY_WORDS)})\b)([{LOCATION_CHARS}]+)",
    flags=re.IGNORECASE,
)
# "London for tomorrow" -> "London"
_TRAILING_DAY_RE = re.compile(
    rf"[\s,]+(?:(?:in|at|for|on)\s+)?(?:{'|'.join(DAY_WORDS)})[\s,'\-]*$",
    flags=re.IGNORECASE,
)
_TOMORROW_RE = re.compile(r"\btomorrow\b", flags=re.IGNORECASE)


@dataclass(frozen=True)
class Intent:
    city: Optional[str]
    day: str = "today"


def is_weather_query(text: str) -> bool:
    return bool(text and _KEYWORD_RE.search(text))


def extract_location(text: str) -> Optional[str]:
    """Return the first location phrase after in/at/for, or None.

    "forecast for Bengaluru tomorrow" -> "Bengaluru"
    "weather in Area 51"              -> "Area"  (digits truncate the phrase)
    """
    m = _LOCATION_RE.search(text or "")
    if not m:
        return None
    phrase = m.group(1)
    # "Paris today, tomorrow" -> "Paris"
    while True:
        stripped = _TRAILING_DAY_RE.sub("", phrase)
        if stripped == phrase:
            break
        phrase = stripped
    phrase = phrase.strip(" \t\r\n,'-")
    return phrase or None


def parse_day(text: str) -> str:
    return "tomorrow" if _TOMORROW_RE.search(text or "") else "today"


def apply_alias(city: str, aliases: Mapping[str, str]) -> str:
    return aliases.get(city.lower().strip(), city)


def parse_weather_query(text: str, aliases: Mapping[str, str] = DEFAULT_ALIASES) -> Optional[Intent]:
    """Parse a free-text utterance into an Intent.

    Returns None when the text is not weather-related. ``city`` is None when
    no location phrase was found; callers must not look anything up then.
    """
    if not is_weather_query(text):
        return None
    city = extract_location(text)
    if city:
        city = apply_alias(city, aliases)
    return Intent(city=city, day=parse_day(text))
