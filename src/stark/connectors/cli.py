"""Local CLI REPL connector for development and testing."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from stark.connectors.base import IncomingMessage

if TYPE_CHECKING:
    from stark.connectors.base import MessageHandler, Reply

logger = logging.getLogger(__name__)

_CLI_CHAT_ID = "cli"
_CLI_SENDER = "user"


class CLIConnector:
    """Interactive REPL connector — reads from stdin, writes to stdout.

    Behaves like a private chat: every line is addressed to the bot.
    """

    def __init__(self, sender: str = _CLI_SENDER) -> None:
        self._sender = sender
        self._running = False

    @property
    def name(self) -> str:
        return "cli"

    async def start(self, handler: MessageHandler) -> None:
        self._running = True
        loop = asyncio.get_event_loop()

        print("Stark team assistant (type 'exit' or Ctrl+C to quit, /help for commands)")
        print("-" * 48)

        while self._running:
            try:
                line = await loop.run_in_executor(None, self._read_input)
            except (EOFError, KeyboardInterrupt):
                print("\nDoei!")
                break

            if line is None or line.strip().lower() in ("exit", "quit"):
                print("Doei!")
                break

            text = line.strip()
            if not text:
                continue

            msg = IncomingMessage(
                text=text,
                chat_id=_CLI_CHAT_ID,
                sender=self._sender,
                connector_name=self.name,
            )

            reply = await handler(msg)
            if reply is not None:
                await self.reply(_CLI_CHAT_ID, reply)

    def _read_input(self) -> str | None:
        try:
            sys.stdout.write("\nYou: ")
            sys.stdout.flush()
            raw = sys.stdin.buffer.readline()
            if not raw:
                return None
            return raw.decode("utf-8", errors="replace").rstrip("\n")
        except EOFError:
            return None

    async def stop(self) -> None:
        self._running = False

    async def send_typing(self, chat_id: str) -> None:
        print("  [Stark is typing...]", file=sys.stderr)

    async def reply(self, chat_id: str, reply: Reply) -> None:
        print(f"\nStark: {reply.text}")
