"""Interactive terminal chat against a running chat API."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, List, Optional

from chatbot.client import ChatApiClient, ChatClientError


PROMPT = 'Enter a message (type "exit" to quit): '
EXIT_COMMANDS = {"exit", "quit"}


def run_repl(
    client: ChatApiClient,
    session_id: str,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """Read lines until ``exit`` or EOF, printing one reply per message."""
    while True:
        try:
            line = read(PROMPT)
        except (EOFError, KeyboardInterrupt):
            write("")
            break

        text = line.strip()
        if not text:
            continue
        if text.lower() in EXIT_COMMANDS:
            break

        try:
            write(client.send_message(text, session_id))
        except ChatClientError as exc:
            write(f"Error: {exc}")

    write("Goodbye!")
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat with the LangChain chatbot API.")
    parser.add_argument("--url", default=None, help="Base URL of the chat API (default: CHAT_API_URL)")
    parser.add_argument("--session", default=None, help="Continue an existing session id")
    parser.add_argument("--name", default="CLI chat", help="Name for a newly created session")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    with ChatApiClient(base_url=args.url) as client:
        session_id = args.session
        if not session_id:
            try:
                session_id = client.create_session(args.name)["id"]
            except ChatClientError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                return 1
        print(f"Welcome to the CLI chat! Session: {session_id}")
        return run_repl(client, session_id)


if __name__ == "__main__":
    sys.exit(main())
