#!/usr/bin/env python3
"""
Movie Explorer command line client.

Runs one search through the fallback chain and prints the rendered cards.

CLI:
    python explorer_cli.py --query batman
    python explorer_cli.py --genre 18 --offline
"""
import argparse
import asyncio
import json
from dataclasses import asdict

from orchestrator import Session
from settings import ClientSettings


async def run(args: argparse.Namespace) -> dict:
    settings = ClientSettings.from_env()
    if args.gateway:
        settings.gateway_url = args.gateway.rstrip("/")

    session = Session.from_settings(settings, offline=args.offline)
    await session.initialize(initial_search=False)
    session.query_text = args.query or ""
    session.genre_id = args.genre
    await session.search(session.current_request(page=args.page))

    view = session.view
    return {
        "source": view.source,
        "status": view.status,
        "cards": [asdict(c) for c in view.cards],
    }


def main():
    parser = argparse.ArgumentParser(description="Movie Explorer search client")
    parser.add_argument("--query", default="", help="Free-text title search (takes precedence over --genre)")
    parser.add_argument("--genre", type=int, default=None, help="Genre id filter, e.g. 18 for Drama")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--gateway", default=None, help="Gateway base URL (defaults to GATEWAY_URL)")
    parser.add_argument("--offline", action="store_true", help="Use only the local demo dataset")
    args = parser.parse_args()

    res = asyncio.run(run(args))
    print(json.dumps(res, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
