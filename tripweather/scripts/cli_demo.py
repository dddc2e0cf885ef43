from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from tripweather.core.errors import ConfigError, ProviderError
from tripweather.core.policy import respond
from tripweather.nlu import get_alias_table
from tripweather.nlu.intent import parse_weather_query


def main():
    ap = argparse.ArgumentParser(description="Chat with the weather bot from the terminal")
    ap.add_argument("--parse-only", action="store_true", help="Only show the parsed intent (no network)")
    args = ap.parse_args()

    load_dotenv()
    print("Trip Weather Chatbot. Type 'exit' to quit.")
    while True:
        try:
            text = input("> ")
        except EOFError:
            break
        if text.strip().lower() in {"exit", "quit"}:
            break
        intent = parse_weather_query(text, get_alias_table())
        print(f"intent={intent}")
        if args.parse_only:
            continue
        try:
            result = respond(text)
        except ConfigError as e:
            print(f"config error: {e}", file=sys.stderr)
            break
        except ProviderError as e:
            print(f"provider error: {e}", file=sys.stderr)
            continue
        print(result.reply)
        print(f"  (outcome={result.outcome}, day={result.day}, location={result.location})")


if __name__ == "__main__":
    main()
