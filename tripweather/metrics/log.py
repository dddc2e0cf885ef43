from __future__ import annotations

import os
import sqlite3
from contextlib import closing
from pathlib import Path
from threading import Lock
from typing import Dict, Optional


def _db_path() -> Path:
    path = os.getenv("CHATBOT_DB_PATH")
    if path:
        return Path(path)
    # default under tripweather/data/
    return Path(__file__).resolve().parents[1] / "data" / "metrics.sqlite"


_INITIALIZED: Dict[Path, bool] = {}
_INIT_LOCK = Lock()


def init_db(path: Path | None = None) -> None:
    db = (path or _db_path()).resolve()
    db.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(str(db), timeout=5)) as conn, conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS chat_interactions (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts DATETIME DEFAULT CURRENT_TIMESTAMP,
              text TEXT,
              city TEXT,
              day TEXT,
              location_label TEXT,
              outcome TEXT,
              latency_ms INTEGER,
              reply_snippet TEXT
            )
            """
        )
        conn.commit()


def _ensure_db(db: Path | None = None) -> Path:
    resolved = (db or _db_path()).resolve()
    with _INIT_LOCK:
        if _INITIALIZED.get(resolved):
            return resolved
        init_db(resolved)
        _INITIALIZED[resolved] = True
        return resolved


def log_interaction(
    *,
    text: str,
    outcome: str,
    latency_ms: int,
    reply: str,
    city: Optional[str] = None,
    day: Optional[str] = None,
    location_label: Optional[str] = None,
    path: Path | None = None,
) -> None:
    """Append one chat turn. ``outcome`` is e.g. current/forecast/not_found/provider_error."""
    db = _ensure_db(path)
    snippet = (reply or "")[:200]
    with closing(sqlite3.connect(str(db), timeout=5)) as conn, conn:
        conn.execute(
            """
            INSERT INTO chat_interactions(text, city, day, location_label, outcome, latency_ms, reply_snippet)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                text,
                city,
                day,
                location_label,
                outcome,
                int(latency_ms),
                snippet,
            ),
        )
        conn.commit()
