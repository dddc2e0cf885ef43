from __future__ import annotations

import os
import sys
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

# Common misspellings / colloquial names → canonical place names.
# Keys are lower-cased; values are kept exactly as written.
DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType({
    "banglore": "bengaluru",
    "bangalore": "bengaluru",
    "bombay": "mumbai",
    "gurgaon": "gurugram",
    "calcutta": "kolkata",
    "banaras": "varanasi",
    "trivandrum": "thiruvananthapuram",
})


def _default_path() -> Path:
    path = os.getenv("CHATBOT_ALIASES_PATH")
    if path:
        return Path(path)
    return Path(__file__).resolve().parents[1] / "data" / "aliases.yml"


def load_aliases(path: Optional[Path] = None) -> Mapping[str, str]:
    """Build the read-only alias table: built-in defaults plus the YAML file.

    The file is optional; when present it must hold an ``aliases:`` mapping.
    Entries in the file override the defaults.
    """
    table = dict(DEFAULT_ALIASES)
    src = path or _default_path()
    if src.exists():
        with open(src, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f) or {}
        extra = y.get("aliases") or {}
        if not isinstance(extra, dict):
            raise ValueError(f"'aliases' in {src} must be a mapping")
        for alias, canonical in extra.items():
            key = str(alias).lower().strip()
            if key and canonical:
                table[key] = str(canonical)
    if os.getenv("CHATBOT_DEBUG") in {"1", "true", "yes", "on"}:
        print(f"[aliases] loaded {len(table)} aliases (file={src})", file=sys.stderr)
    return MappingProxyType(table)
