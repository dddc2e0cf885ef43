"""Minimal WeatherAPI.com client.

Three calls: free-text location search, current conditions and N-day
forecast by coordinate pair. Transport failures and non-2xx answers raise
``ProviderError``; a missing API key raises ``ConfigError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import os
import sys

import requests

from tripweather.core.errors import ConfigError, ProviderError

DEFAULT_BASE_URL = "https://api.weatherapi.com/v1"


def _debug_enabled() -> bool:
    val = (os.getenv("CHATBOT_DEBUG") or "").strip().lower()
    return val in {"1", "true", "yes", "on"}


def _base_url() -> str:
    return (os.getenv("WEATHER_API_BASE") or DEFAULT_BASE_URL).rstrip("/")


def _timeout() -> float:
    try:
        return float(os.getenv("WEATHER_API_TIMEOUT", "10"))
    except ValueError:
        return 10.0


def has_api_key() -> bool:
    return bool((os.getenv("WEATHER_API_KEY") or "").strip())


def api_key() -> str:
    key = (os.getenv("WEATHER_API_KEY") or "").strip()
    if not key:
        raise ConfigError("WEATHER_API_KEY is not set")
    return key


def _get_json(path: str, params: Dict[str, Any]) -> Any:
    url = f"{_base_url()}/{path}"
    query = {"key": api_key(), **params}
    if _debug_enabled():
        shown = {k: v for k, v in query.items() if k != "key"}
        print(f"[weatherapi] GET {url} {shown}", file=sys.stderr)
    try:
        resp = requests.get(url, params=query, timeout=_timeout())
    except requests.RequestException as e:
        raise ProviderError(f"WeatherAPI request failed: {e}") from e
    if not resp.ok:
        # Body carries the provider's error code/message, keep it for operators
        raise ProviderError(
            f"WeatherAPI {path} {resp.status_code}: {resp.text[:200]}",
            status_code=resp.status_code,
        )
    try:
        return resp.json()
    except ValueError as e:
        raise ProviderError(f"WeatherAPI {path} returned invalid JSON") from e


def search_locations(query: str) -> List[Dict[str, Any]]:
    """Return provider candidates ({name, region, country, lat, lon, ...})."""
    data = _get_json("search.json", {"q": query})
    if not isinstance(data, list):
        raise ProviderError("WeatherAPI search returned an unexpected payload")
    return data


def fetch_current(q: str) -> Dict[str, Any]:
    """Current conditions for a "lat,lon" query key."""
    return _get_json("current.json", {"q": q, "aqi": "no"})


def fetch_forecast(q: str, days: int = 2) -> Dict[str, Any]:
    """Daily forecast for a "lat,lon" query key; day 0 is today."""
    return _get_json(
        "forecast.json",
        {"q": q, "days": days, "aqi": "no", "alerts": "no"},
    )


def forecast_day(data: Dict[str, Any], index: int = 1) -> Optional[Dict[str, Any]]:
    """Return ``forecastday[index].day``, falling back to the first day."""
    days = ((data or {}).get("forecast") or {}).get("forecastday") or []
    if not days:
        return None
    entry = days[index] if len(days) > index else days[0]
    return entry.get("day")
