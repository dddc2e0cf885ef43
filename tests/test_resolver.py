import pytest

from tripweather.core.errors import ProviderError
from tripweather.core.resolver import (
    Candidate,
    LocationResolver,
    ResolvedLocation,
    choose_best,
    explicit_country,
    format_label,
    score_candidate,
)

PARIS_FR = {"name": "Paris", "region": "Ile-de-France", "country": "France", "lat": 48.87, "lon": 2.33}
PARIS_US = {"name": "Paris", "region": "Texas", "country": "United States", "lat": 33.66, "lon": -95.56}
ALIASES = {"bombay": "mumbai", "banglore": "bengaluru"}


def _cands(*rows):
    return [Candidate.from_result(r) for r in rows]


class FakeSearch:
    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []

    def __call__(self, query):
        self.calls.append(query)
        return list(self.results.get(query, []))


def test_explicit_country_decides():
    fr = {"name": "Paris", "country": "France", "region": "", "lat": 1, "lon": 2}
    us = {"name": "Paris", "country": "United States", "region": "", "lat": 3, "lon": 4}
    best = choose_best(_cands(us, fr), "Paris, France")
    assert best.country == "France"


def test_explicit_country_beats_preferred_country():
    best = choose_best(_cands(PARIS_US, PARIS_FR), "Paris, France", preferred_country="United States")
    assert best.country == "France"


def test_preferred_country_breaks_name_tie():
    best = choose_best(_cands(PARIS_FR, PARIS_US), "Paris", preferred_country="united states")
    assert best.country == "United States"


def test_ties_keep_first_candidate():
    best = choose_best(_cands(PARIS_US, PARIS_FR), "Paris")
    assert best.country == "United States"


def test_all_zero_scores_fall_back_to_first():
    rows = [
        {"name": "Springfield", "region": "Illinois", "country": "USA", "lat": 1, "lon": 1},
        {"name": "Springfield", "region": "Missouri", "country": "USA", "lat": 2, "lon": 2},
    ]
    best = choose_best(_cands(*rows), "Shelbyville")
    assert best.region == "Illinois"


def test_empty_candidates():
    assert choose_best([], "Paris") is None


def test_score_components_are_additive():
    c = Candidate(name="Delhi", region="Delhi", country="India", lat=1, lon=2)
    # exact (6) + prefix (3) + region prefix (1)
    assert score_candidate(c, "delhi", None, None) == 10
    # + preferred country (4)
    assert score_candidate(c, "delhi", None, "India") == 14
    # explicit country present: preferred bonus is not applied
    assert score_candidate(c, "delhi, india", "india", "India") == 5


def test_prefix_beats_region_only_match():
    rows = [
        {"name": "Karnal", "region": "Haryana", "country": "India", "lat": 1, "lon": 1},
        {"name": "Bengaluru", "region": "Karnataka", "country": "India", "lat": 2, "lon": 2},
        {"name": "Karnataka Nagar", "region": "Goa", "country": "India", "lat": 3, "lon": 3},
    ]
    best = choose_best(_cands(*rows), "Karnataka")
    assert best.name == "Karnataka Nagar"


def test_explicit_country_uses_text_after_last_comma():
    assert explicit_country("Delhi, India") == "india"
    assert explicit_country("Springfield, Illinois, United States") == "united states"
    assert explicit_country("Delhi") is None
    # Known limitation: state codes are treated as countries
    assert explicit_country("Mountain View, CA") == "ca"


def test_label_formatting():
    with_region = Candidate(name="Bengaluru", region="Karnataka", country="India", lat=12.98, lon=77.58)
    no_region = Candidate(name="Bengaluru", region="", country="India", lat=12.98, lon=77.58)
    assert format_label(with_region) == "Bengaluru, Karnataka, India"
    assert format_label(no_region) == "Bengaluru, India"


def test_resolve_produces_coordinate_key():
    search = FakeSearch({"Paris, France": [PARIS_US, PARIS_FR]})
    resolver = LocationResolver(search, ALIASES)
    loc = resolver.resolve("Paris, France")
    assert loc == ResolvedLocation(query_key="48.87,2.33", label="Paris, Ile-de-France, France")
    assert search.calls == ["Paris, France"]


def test_resolver_uses_configured_preferred_country():
    search = FakeSearch({"Paris": [PARIS_FR, PARIS_US]})
    resolver = LocationResolver(search, ALIASES, preferred_country=" United States ")
    assert resolver.resolve("Paris").query_key == "33.66,-95.56"


def test_alias_retry_after_empty_result():
    mumbai = {"name": "Mumbai", "region": "Maharashtra", "country": "India", "lat": 18.98, "lon": 72.83}
    search = FakeSearch({"mumbai": [mumbai]})
    resolver = LocationResolver(search, ALIASES)
    loc = resolver.resolve(" Bombay ")
    assert loc.label == "Mumbai, Maharashtra, India"
    assert search.calls == [" Bombay ", "mumbai"]


def test_no_retry_when_first_search_has_results():
    search = FakeSearch({"Bombay": [PARIS_FR]})
    LocationResolver(search, ALIASES).resolve("Bombay")
    assert search.calls == ["Bombay"]


def test_not_found_after_single_alias_retry():
    search = FakeSearch()
    assert LocationResolver(search, ALIASES).resolve("Bombay") is None
    assert search.calls == ["Bombay", "mumbai"]


def test_not_found_without_alias_searches_once():
    search = FakeSearch()
    assert LocationResolver(search, ALIASES).resolve("Atlantis") is None
    assert search.calls == ["Atlantis"]


def test_blank_input_never_searches():
    search = FakeSearch()
    assert LocationResolver(search, ALIASES).resolve("  ") is None
    assert search.calls == []


def test_provider_error_propagates():
    def broken(query):
        raise ProviderError("down", status_code=503)

    with pytest.raises(ProviderError):
        LocationResolver(broken, ALIASES).resolve("Paris")


def test_results_without_coordinates_are_skipped():
    broken = {"name": "Paris", "region": "", "country": "France", "lat": None}
    search = FakeSearch({"Paris": [broken, PARIS_US]})
    loc = LocationResolver(search, ALIASES).resolve("Paris")
    assert loc.query_key == "33.66,-95.56"


def test_only_coordinate_less_results_is_not_found():
    search = FakeSearch({"Paris": [{"name": "Paris", "country": "France"}]})
    assert LocationResolver(search, ALIASES).resolve("Paris") is None
