import pytest

from tripweather.nlu.aliases import DEFAULT_ALIASES
from tripweather.nlu.intent import (
    Intent,
    extract_location,
    is_weather_query,
    parse_day,
    parse_weather_query,
)


@pytest.mark.parametrize(
    "text",
    ["hello there", "book a hotel in Goa", "what time is it in Tokyo?", "", "plan my trip for tomorrow"],
)
def test_non_weather_text_returns_none(text):
    assert parse_weather_query(text) is None


def test_keywords_are_case_insensitive_substrings():
    assert is_weather_query("WEATHER please")
    assert is_weather_query("Temperatures in Delhi")
    assert is_weather_query("what's the climate like")
    assert not is_weather_query("sunny beaches")


def test_weather_in_tokyo():
    assert parse_weather_query("weather in Tokyo") == Intent(city="Tokyo", day="today")


def test_forecast_for_city_tomorrow():
    assert parse_weather_query("forecast for Bengaluru tomorrow") == Intent(city="Bengaluru", day="tomorrow")


def test_alias_folds_to_canonical_form():
    intent = parse_weather_query("weather in Bombay")
    assert intent == Intent(city="mumbai", day="today")


def test_alias_lookup_ignores_case_and_spaces():
    assert parse_weather_query("weather in  BANGALORE ?").city == "bengaluru"


def test_alias_uses_injected_table():
    aliases = {"nyc": "New York"}
    assert parse_weather_query("weather in NYC", aliases).city == "New York"
    # Default table is not consulted when another one is injected
    assert parse_weather_query("weather in Bombay", aliases).city == "Bombay"


def test_weather_without_location_has_null_city():
    assert parse_weather_query("what's the weather like") == Intent(city=None, day="today")


def test_question_mark_and_period_end_phrase():
    assert extract_location("What's the weather in Paris, France?") == "Paris, France"
    assert extract_location("Temperature at Kolkata. Thanks") == "Kolkata"


def test_first_preposition_wins():
    intent = parse_weather_query("weather in Pune for Delhi")
    assert intent.city == "Pune for Delhi"
    assert extract_location("temp at Goa. forecast for Delhi") == "Goa"


def test_preposition_followed_by_day_word_is_skipped():
    assert parse_weather_query("forecast for tomorrow in Delhi") == Intent(city="Delhi", day="tomorrow")


def test_trailing_day_words_are_stripped():
    assert extract_location("weather in Bhiwadi today?") == "Bhiwadi"
    assert extract_location("weather in Paris, tomorrow") == "Paris"


@pytest.mark.parametrize(
    "text, city, day",
    [
        ("forecast in London for tomorrow", "London", "tomorrow"),
        ("weather in Paris for tomorrow", "Paris", "tomorrow"),
        ("what's the temperature in Delhi for today?", "Delhi", "today"),
        ("weather at Pune on tomorrow", "Pune", "tomorrow"),
    ],
)
def test_preposition_before_trailing_day_word_is_stripped(text, city, day):
    assert parse_weather_query(text) == Intent(city=city, day=day)


def test_digits_truncate_phrase():
    assert extract_location("temp in Area 51") == "Area"
    assert extract_location("weather in Sector 5 Gurugram") == "Sector"


def test_no_phrase_when_preposition_directly_followed_by_digits():
    assert extract_location("weather at 5pm") is None


def test_apostrophes_and_hyphens_are_kept():
    assert extract_location("weather in Martha's Vineyard") == "Martha's Vineyard"
    assert extract_location("weather in Stratford-upon-Avon") == "Stratford-upon-Avon"


def test_preposition_must_be_whole_word():
    # "within" and "format" contain in/at but are not prepositions
    assert extract_location("forecast within reason") is None
    assert extract_location("format weather") is None


def test_day_detection_whole_word():
    assert parse_day("weather TOMORROW in Pune") == "tomorrow"
    assert parse_day("weather in Pune") == "today"
    assert parse_day("tomorrows weather") == "today"


def test_default_table_is_shared_read_only():
    with pytest.raises(TypeError):
        DEFAULT_ALIASES["x"] = "y"  # type: ignore[index]
