"""Location resolution: free-text place name → coordinate query key + label.

The resolver asks a search provider for candidates, retries once with the
alias table's canonical form when the first search comes back empty, and
picks the best candidate with an additive scoring heuristic.

Provider faults (``ProviderError``) propagate untouched so callers can tell
"unknown place" (``None``) apart from "weather service down".
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

SearchFn = Callable[[str], List[Dict[str, Any]]]

SCORE_EXACT_NAME = 6
SCORE_NAME_PREFIX = 3
SCORE_EXPLICIT_COUNTRY = 5
SCORE_PREFERRED_COUNTRY = 4
SCORE_REGION_PREFIX = 1

# Letters/spaces after the last comma, e.g. "Delhi, India" -> "india".
# Also fires on "Mountain View, CA" (state codes look like countries).
_EXPLICIT_COUNTRY_RE = re.compile(r",\s*([A-Za-z\s]+)$")


def _debug_enabled() -> bool:
    val = (os.getenv("CHATBOT_DEBUG") or "").strip().lower()
    return val in {"1", "true", "yes", "on"}


def normalize(s: Optional[str]) -> str:
    return (s or "").lower().strip()


@dataclass
class Candidate:
    name: str
    region: str
    country: str
    lat: float
    lon: float

    @classmethod
    def from_result(cls, r: Dict[str, Any]) -> "Candidate":
        return cls(
            name=r.get("name") or "",
            region=r.get("region") or "",
            country=r.get("country") or "",
            lat=r.get("lat"),
            lon=r.get("lon"),
        )


@dataclass(frozen=True)
class ResolvedLocation:
    query_key: str
    label: str


def explicit_country(raw_query: str) -> Optional[str]:
    m = _EXPLICIT_COUNTRY_RE.search(raw_query or "")
    if not m:
        return None
    return normalize(m.group(1)) or None


def score_candidate(
    c: Candidate,
    query: str,
    explicit: Optional[str],
    preferred_country: Optional[str],
) -> int:
    """Additive score of one candidate against the normalized raw query."""
    name = normalize(c.name)
    region = normalize(c.region)
    country = normalize(c.country)
    preferred = normalize(preferred_country)

    score = 0
    if query and name == query:
        score += SCORE_EXACT_NAME
    if query and name.startswith(query):
        score += SCORE_NAME_PREFIX
    if explicit and country == explicit:
        score += SCORE_EXPLICIT_COUNTRY
    if not explicit and preferred and country == preferred:
        score += SCORE_PREFERRED_COUNTRY
    if query and region.startswith(query):
        score += SCORE_REGION_PREFIX
    return score


def choose_best(
    candidates: List[Candidate],
    raw_query: str,
    preferred_country: Optional[str] = None,
) -> Optional[Candidate]:
    """Highest score wins; ties keep the earliest candidate in provider order."""
    if not candidates:
        return None
    query = normalize(raw_query)
    explicit = explicit_country(raw_query)

    best: Optional[Candidate] = None
    best_score = -1
    for c in candidates:
        score = score_candidate(c, query, explicit, preferred_country)
        if score > best_score:
            best_score = score
            best = c
    return best or candidates[0]


def format_label(c: Candidate) -> str:
    if c.region:
        return f"{c.name}, {c.region}, {c.country}"
    return f"{c.name}, {c.country}"


def to_resolved(c: Candidate) -> ResolvedLocation:
    # Coordinates, not the display name, so the weather fetch can't pick
    # a different "Paris".
    return ResolvedLocation(query_key=f"{c.lat},{c.lon}", label=format_label(c))


class LocationResolver:
    """Resolves raw place names with one alias-based retry.

    ``search`` is any callable returning provider-shaped result dicts
    (name, region, country, lat, lon). ``aliases`` is the shared read-only
    alias table.
    """

    def __init__(
        self,
        search: SearchFn,
        aliases: Mapping[str, str],
        preferred_country: Optional[str] = None,
    ) -> None:
        self.search = search
        self.aliases = aliases
        self.preferred_country = (preferred_country or "").strip() or None

    def candidates(self, raw: str) -> List[Candidate]:
        results = self.search(raw) or []
        if not results:
            canonical = self.aliases.get(normalize(raw))
            if canonical:
                if _debug_enabled():
                    print(f"[resolver] no results for '{raw}', retrying as '{canonical}'", file=sys.stderr)
                results = self.search(canonical) or []
        # A result without coordinates can't produce a query key
        usable = [r for r in results if r.get("lat") is not None and r.get("lon") is not None]
        if len(usable) < len(results) and _debug_enabled():
            print(f"[resolver] dropped {len(results) - len(usable)} results without coordinates", file=sys.stderr)
        return [Candidate.from_result(r) for r in usable]

    def resolve(self, raw: str) -> Optional[ResolvedLocation]:
        if not raw or not raw.strip():
            return None
        found = self.candidates(raw)
        best = choose_best(found, raw, self.preferred_country)
        if best is None:
            if _debug_enabled():
                print(f"[resolver] not found: '{raw}'", file=sys.stderr)
            return None
        resolved = to_resolved(best)
        if _debug_enabled():
            print(
                f"[resolver] '{raw}' -> {resolved.label} ({resolved.query_key}) from {len(found)} candidates",
                file=sys.stderr,
            )
        return resolved
