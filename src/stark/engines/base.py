"""Engine protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class EngineError(RuntimeError):
    """The model call failed (network, auth, rate limit, malformed response)."""


@dataclass
class AgentResponse:
    """Response from an AI engine."""

    text: str
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None


@runtime_checkable
class Engine(Protocol):
    """Protocol that all engine backends must implement."""

    @property
    def name(self) -> str: ...

    async def send(
        self,
        messages: list[dict],
        *,
        system_prompt: str | None = None,
    ) -> AgentResponse:
        """Send the conversation to the engine and return the reply.

        Raises EngineError when the call fails.
        """
        ...
