"""Chat policy: one utterance in, one reply out.

Pipeline per request: configuration check → intent parse → (if a city was
found) location resolution with at most one alias retry → current
conditions (today) or 2-day forecast (tomorrow) → reply formatting.

Nothing is remembered between requests. ``ConfigError`` and
``ProviderError`` propagate to the caller; "location not found" and
"not a weather question" are ordinary replies.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, asdict
from functools import lru_cache
from typing import Any, Dict, Optional

from tripweather.core import replies
from tripweather.core.resolver import LocationResolver, SearchFn
from tripweather.nlu import get_alias_table
from tripweather.nlu.intent import parse_weather_query
from tripweather.tools.places import LocalPlaces, csv_path_from_env
from tripweather.tools.weatherapi import (
    api_key,
    fetch_current,
    fetch_forecast,
    search_locations,
)

FORECAST_DAYS = 2


@dataclass
class ChatResult:
    reply: str
    day: Optional[str] = None
    location: Optional[str] = None
    outcome: str = "help"
    city: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {"day": self.day, "location": self.location}

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_country() -> Optional[str]:
    return (os.getenv("DEFAULT_COUNTRY") or "").strip() or None


def provider_name() -> str:
    name = (os.getenv("GEOCODE_PROVIDER") or "weatherapi").strip().lower()
    return name if name in {"weatherapi", "local"} else "weatherapi"


@lru_cache(maxsize=8)
def local_places(csv_path: str) -> LocalPlaces:
    """One loaded provider per CSV path; a new PLACES_CSV gets its own."""
    return LocalPlaces(csv_path)


def _search_provider() -> SearchFn:
    if provider_name() == "local":
        return local_places(csv_path_from_env()).search
    return search_locations


def build_resolver() -> LocationResolver:
    return LocationResolver(
        search=_search_provider(),
        aliases=get_alias_table(),
        preferred_country=default_country(),
    )


def respond(text: str) -> ChatResult:
    # Fail fast on every request until the key is configured
    api_key()

    intent = parse_weather_query(text, get_alias_table())
    if intent is None or not intent.city:
        return ChatResult(reply=replies.HELP_REPLY)

    location = build_resolver().resolve(intent.city)
    if location is None:
        return ChatResult(
            reply=replies.not_found_reply(intent.city),
            day=intent.day,
            outcome="not_found",
            city=intent.city,
        )

    if intent.day == "today":
        data = fetch_current(location.query_key)
        reply = replies.format_current(location.label, data)
        outcome = "current"
    else:
        data = fetch_forecast(location.query_key, days=FORECAST_DAYS)
        reply = replies.format_forecast(location.label, intent.day, data)
        outcome = "forecast"
    return ChatResult(
        reply=reply,
        day=intent.day,
        location=location.label,
        outcome=outcome,
        city=intent.city,
    )
