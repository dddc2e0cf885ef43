"""User-facing reply templates."""

from __future__ import annotations

from typing import Any, Dict

from tripweather.core.errors import ProviderError
from tripweather.tools.weatherapi import forecast_day

HELP_REPLY = "I answer weather queries. Try: weather in Bhiwadi, forecast for Bengaluru tomorrow."
EMPTY_MESSAGE_REPLY = "Say: what's the weather in Tokyo?"
CONFIG_ERROR_REPLY = "Server missing WEATHER_API_KEY. Add it to .env and restart."
PROVIDER_ERROR_REPLY = "Sorry, the weather service is unavailable right now. Please try again later."
GENERIC_ERROR_REPLY = "Sorry, something went wrong while processing your request."


def not_found_reply(city: str) -> str:
    return f"I couldn't find “{city}”. Try adding the country (e.g., “{city}, India”)."


def format_current(label: str, data: Dict[str, Any]) -> str:
    c = (data or {}).get("current")
    if not c:
        raise ProviderError("No current weather data available")
    condition = (c.get("condition") or {}).get("text") or "Conditions unavailable"
    return (
        f"Weather in {label} (now): "
        f"{c.get('temp_c')}°C ({c.get('temp_f')}°F), {condition}. "
        f"Feels like {c.get('feelslike_c')}°C. "
        f"Humidity {c.get('humidity')}%, wind {c.get('wind_kph')} kph."
    )


def format_forecast(label: str, day: str, data: Dict[str, Any]) -> str:
    d = forecast_day(data, 1)
    if not d:
        raise ProviderError("No forecast data available")
    condition = (d.get("condition") or {}).get("text") or "Conditions unavailable"
    rain = d.get("daily_chance_of_rain")
    if rain is None:
        rain = "—"
    return (
        f"Forecast in {label} ({day}): "
        f"Avg {d.get('avgtemp_c')}°C, High {d.get('maxtemp_c')}°C, Low {d.get('mintemp_c')}°C, "
        f"{condition}. Chance of rain {rain}%."
    )
