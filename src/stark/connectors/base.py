"""Connector protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Coroutine, Optional, Protocol, runtime_checkable


@dataclass
class IncomingMessage:
    """A message received from any connector."""

    text: str
    chat_id: str
    sender: str = ""
    connector_name: str = ""
    is_group: bool = False
    reply_to_bot: bool = False  # replies to one of our own messages
    metadata: dict = field(default_factory=dict)


@dataclass
class Reply:
    """Text to deliver back to a chat."""

    text: str
    parse_mode: str | None = "Markdown"


# Callback type: core.Stark.handle_message (None means: stay silent)
MessageHandler = Callable[[IncomingMessage], Coroutine[None, None, Optional[Reply]]]


def split_message(text: str, limit: int) -> list[str]:
    """Split *text* into sequential chunks of at most *limit* characters."""
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")
    return [text[i : i + limit] for i in range(0, len(text), limit)]


@runtime_checkable
class Connector(Protocol):
    """Protocol that all input connectors must implement."""

    @property
    def name(self) -> str: ...

    async def start(self, handler: MessageHandler) -> None:
        """Start listening for messages. Call handler for each incoming message."""
        ...

    async def stop(self) -> None:
        """Gracefully stop the connector."""
        ...

    async def reply(self, chat_id: str, reply: Reply) -> None:
        """Send a reply back to the given chat."""
        ...

    async def send_typing(self, chat_id: str) -> None:
        """Show a typing indicator in the given chat."""
        ...
