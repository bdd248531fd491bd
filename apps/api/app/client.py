"""Command line client for the Ask API.

Usage:
    ask-client                          # health check + demo questions
    ask-client "What is Rust?"          # ask specific questions
    ask-client --interactive            # prompt loop (q to quit)
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

import httpx


DEFAULT_BASE_URL = "http://localhost:8000"
DEMO_QUESTIONS = (
    "Что такое Rust?",
    "Что такое Rocket?",
    "Hi!",
)


def _build_client(base_url: str, timeout: float) -> httpx.Client:
    return httpx.Client(base_url=base_url, timeout=timeout)


def fetch_health(client: httpx.Client) -> dict[str, Any]:
    response = client.get("/health")
    response.raise_for_status()
    return response.json()


def ask_question(client: httpx.Client, question: str) -> str:
    response = client.post("/ask", json={"question": question})
    data = response.json()
    if response.is_success:
        return f"[{data.get('source', '?')}] {data.get('answer', '')}"
    return f"error {response.status_code}: {data.get('error_code', '?')} - {data.get('message', '')}"


def _interactive(client: httpx.Client) -> None:
    while True:
        try:
            question = input("\nquestion> ").strip()
        except (KeyboardInterrupt, EOFError):
            print()
            return
        if not question:
            continue
        if question.lower() in {"q", "quit", "exit"}:
            return
        print(ask_question(client, question))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ask the question answering API")
    parser.add_argument("questions", nargs="*", help="questions to ask (defaults to a demo set)")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--timeout", type=float, default=60.0)
    parser.add_argument("--interactive", action="store_true")
    args = parser.parse_args(argv)

    with _build_client(args.base_url, args.timeout) as client:
        try:
            health = fetch_health(client)
        except httpx.HTTPError as exc:
            print(f"server unavailable at {args.base_url}: {exc}", file=sys.stderr)
            return 1

        print(f"status={health.get('status')} version={health.get('version')} "
              f"ai_enabled={health.get('ai_enabled')} service={health.get('ai_service')}")

        if args.interactive:
            _interactive(client)
            return 0

        for question in args.questions or DEMO_QUESTIONS:
            print(f"\n> {question}")
            print(ask_question(client, question))
    return 0


if __name__ == "__main__":
    sys.exit(main())
