"""Error types shared by the chat pipeline.

"Location not found" is not an error: the resolver returns ``None`` for it.
"""

from __future__ import annotations

from typing import Optional


class ChatbotError(Exception):
    pass


class ConfigError(ChatbotError):
    """Required configuration (e.g. the provider API key) is missing or invalid."""


class ProviderError(ChatbotError):
    """Transport failure or non-2xx answer from the geocoding/weather provider."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
