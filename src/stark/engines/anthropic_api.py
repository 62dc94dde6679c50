"""Anthropic API engine — pure conversation, no tool use."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import anthropic

from stark.engines.base import AgentResponse, EngineError

logger = logging.getLogger(__name__)


@dataclass
class AnthropicAPIEngine:
    """Direct Anthropic API via the `anthropic` SDK."""

    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 2048
    api_key: str | None = None

    def __post_init__(self) -> None:
        self._client = anthropic.Anthropic(api_key=self.api_key or None)

    @property
    def name(self) -> str:
        return "anthropic_api"

    async def send(
        self,
        messages: list[dict],
        *,
        system_prompt: str | None = None,
    ) -> AgentResponse:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await asyncio.to_thread(self._client.messages.create, **kwargs)
        except Exception as e:
            logger.error("Anthropic API error: %s", e)
            raise EngineError(f"Anthropic API error: {e}") from e

        if not response.content or not getattr(response.content[0], "text", None):
            logger.error("Anthropic API returned no text content (model=%s)", response.model)
            raise EngineError("Anthropic API returned no text content")

        input_tokens = output_tokens = None
        if response.usage:
            input_tokens = response.usage.input_tokens
            output_tokens = response.usage.output_tokens

        return AgentResponse(
            text=response.content[0].text,
            model=response.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
