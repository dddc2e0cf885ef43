from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from rapidfuzz import fuzz as rf_fuzz
from rapidfuzz import process as rf_process

from tripweather.core.errors import ConfigError


def _debug_enabled() -> bool:
    val = (os.getenv("CHATBOT_DEBUG") or "").strip().lower()
    return val in {"1", "true", "yes", "on"}


def csv_path_from_env() -> str:
    default = Path(__file__).resolve().parents[1] / "data" / "places.csv"
    return os.getenv("PLACES_CSV") or str(default)


def _norm(s: str) -> str:
    s = s.lower()
    s = re.sub(r"[^a-z0-9 ]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


class LocalPlaces:
    """Offline search provider backed by a CSV of places.

    Returns results shaped like the WeatherAPI search endpoint so the
    resolver can score them the same way.

    Expected columns (case-insensitive):
      - name (place name)
      - region (state/province; may be empty)
      - country
      - lat / latitude
      - lon / lng / long / longitude

    Config:
      - PLACES_CSV: path to CSV (default: tripweather/data/places.csv)
      - LOCAL_FUZZY_SCORE_CUTOFF: minimal score (default 80)
      - LOCAL_MAX_RESULTS: cap on returned candidates (default 10)
    """

    def __init__(self, csv_path: Optional[str] = None) -> None:
        self.csv_path = csv_path or csv_path_from_env()
        self._df: Optional[pd.DataFrame] = None

    def _load(self) -> pd.DataFrame:
        if self._df is not None:
            return self._df
        try:
            df = pd.read_csv(self.csv_path, keep_default_na=False)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ConfigError(f"cannot read places CSV at {self.csv_path}: {e}") from e
        cols = {c.lower(): c for c in df.columns}

        def pick(*names: str) -> Optional[str]:
            for n in names:
                if n in cols:
                    return cols[n]
            return None

        name_col = pick("name", "place", "city")
        region_col = pick("region", "state", "province")
        country_col = pick("country")
        lat_col = pick("lat", "latitude")
        lon_col = pick("lon", "lng", "long", "longitude")
        if not all([name_col, country_col, lat_col, lon_col]):
            raise ConfigError(f"missing required columns in {self.csv_path}")
        work = pd.DataFrame()
        work["name"] = df[name_col].astype(str)
        work["region"] = df[region_col].astype(str) if region_col else ""
        work["country"] = df[country_col].astype(str)
        work["lat"] = pd.to_numeric(df[lat_col], errors="coerce")
        work["lon"] = pd.to_numeric(df[lon_col], errors="coerce")
        work = work.dropna(subset=["lat", "lon"]).reset_index(drop=True)
        work["norm"] = work["name"].map(_norm)
        self._df = work
        if _debug_enabled():
            print(f"[places] loaded {len(work)} places from {self.csv_path}", file=sys.stderr)
        return self._df

    def _max_results(self) -> int:
        try:
            return max(int(os.getenv("LOCAL_MAX_RESULTS", "10")), 1)
        except ValueError:
            return 10

    def search(self, query: str) -> List[Dict[str, Any]]:
        df = self._load()
        # "Delhi, India" searches by "Delhi"; the resolver handles the country
        key = _norm((query or "").split(",")[0])
        if not key:
            return []
        limit = self._max_results()
        cand = df[df["norm"].str.contains(key, regex=False, na=False)]
        if cand.empty:
            try:
                cutoff = int(os.getenv("LOCAL_FUZZY_SCORE_CUTOFF", "80"))
            except ValueError:
                cutoff = 80
            matches = rf_process.extract(
                key,
                list(df["norm"].values),
                scorer=rf_fuzz.partial_ratio,
                score_cutoff=cutoff,
                limit=limit,
            )
            if not matches:
                return []
            # extract() yields (choice, score, index); keep best-first order
            cand = df.iloc[[m[2] for m in matches]]
        return [
            {
                "name": row["name"],
                "region": row["region"],
                "country": row["country"],
                "lat": float(row["lat"]),
                "lon": float(row["lon"]),
            }
            for _, row in cand.head(limit).iterrows()
        ]
