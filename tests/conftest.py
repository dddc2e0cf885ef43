import sys
from pathlib import Path
import pytest

# Ensure project root is on sys.path for imports like `from tripweather...`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # Known configuration per test: fake key, temp metrics DB, no country bias
    monkeypatch.setenv("WEATHER_API_KEY", "test-key")
    monkeypatch.setenv("CHATBOT_DB_PATH", str(tmp_path / "metrics.sqlite"))
    for name in ("DEFAULT_COUNTRY", "GEOCODE_PROVIDER", "CHATBOT_ALIASES_PATH", "PLACES_CSV", "CHATBOT_DEBUG"):
        monkeypatch.delenv(name, raising=False)

    from tripweather.nlu import get_alias_table
    from tripweather.core import policy

    get_alias_table.cache_clear()
    policy.local_places.cache_clear()
    yield
    get_alias_table.cache_clear()
    policy.local_places.cache_clear()


@pytest.fixture
def places_csv(tmp_path):
    import pandas as pd

    csv = tmp_path / "places.csv"
    df = pd.DataFrame(
        {
            "name": ["Paris", "Paris", "Bengaluru", "Tokyo"],
            "region": ["Ile-de-France", "Texas", "Karnataka", "Tokyo"],
            "country": ["France", "United States of America", "India", "Japan"],
            "lat": [48.87, 33.66, 12.98, 35.69],
            "lon": [2.33, -95.56, 77.58, 139.69],
        }
    )
    df.to_csv(csv, index=False)
    return csv
