from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

import yaml

from tripweather.nlu.aliases import load_aliases
from tripweather.nlu.intent import parse_weather_query

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def load_eval_yaml(path: str) -> List[Dict[str, Any]]:
    """Each example: {text, weather: bool, city: str|null, day: today|tomorrow}."""
    with open(path, "r", encoding="utf-8") as f:
        y = yaml.safe_load(f) or {}
    return list(y.get("examples", []) or [])


def _expected(ex: Dict[str, Any]) -> Dict[str, Any] | None:
    if not ex.get("weather", True):
        return None
    return {"city": ex.get("city"), "day": ex.get("day", "today")}


def run_eval(eval_path: str, aliases_path: str | None = None) -> dict:
    aliases = load_aliases(Path(aliases_path) if aliases_path else None)
    rows = []
    for ex in load_eval_yaml(eval_path):
        text = ex.get("text", "")
        intent = parse_weather_query(text, aliases)
        got = None if intent is None else {"city": intent.city, "day": intent.day}
        want = _expected(ex)
        rows.append({"text": text, "expected": want, "predicted": got, "ok": got == want})

    total = len(rows)
    correct = sum(1 for r in rows if r["ok"])
    return {
        "accuracy": (correct / total) if total else 0.0,
        "total": total,
        "correct": correct,
        "rows": rows,
    }


def main():
    ap = argparse.ArgumentParser(description="Evaluate the weather intent parser")
    ap.add_argument("--eval", default=str(DATA_DIR / "eval.yml"), help="Eval YAML path")
    ap.add_argument("--aliases", default=None, help="Optional alias YAML path")
    ap.add_argument("--min-accuracy", type=float, default=None, help="Optional minimum accuracy threshold")
    ap.add_argument("--json", default=None, help="Optional path to write summary JSON")
    args = ap.parse_args()

    results = run_eval(args.eval, args.aliases)
    acc = results["accuracy"]

    print("\nOverall accuracy: {:.3f} ({}/{})".format(acc, results["correct"], results["total"]))
    print("\nMisses:")
    for r in results["rows"]:
        if not r["ok"]:
            print(json.dumps(r, ensure_ascii=False))

    if args.json:
        with open(args.json, "w", encoding="utf-8") as fh:
            json.dump(results, fh, ensure_ascii=False, indent=2)

    if args.min_accuracy is not None and acc < args.min_accuracy:
        raise SystemExit(f"Accuracy {acc:.3f} < required threshold {args.min_accuracy:.3f}")


if __name__ == "__main__":
    main()
