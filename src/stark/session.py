"""Conversation session — one model turn per inbound message.

handle_turn:
1. Append the user turn (tagged with the sender) to the bounded history
2. Call the engine with the composed system prompt + history
3. Record the raw reply as an assistant turn and persist history
4. Remember every [ONTHOUD: ...] fact in the reply
5. Return the reply with the memory markers stripped

A failed model call leaves no assistant turn behind and yields a fixed
apology instead. There is no retry.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from stark import markers
from stark.engines.base import EngineError

if TYPE_CHECKING:
    from stark.engines.base import Engine
    from stark.memory.facts import FactLedger
    from stark.memory.history import HistoryLedger
    from stark.prompt import PromptComposer

logger = logging.getLogger(__name__)

APOLOGY = "⚠️ Er ging iets mis met de AI. Probeer het opnieuw."


class SessionState(enum.Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class ConversationSession:
    def __init__(
        self,
        engine: Engine,
        history: HistoryLedger,
        facts: FactLedger,
        composer: PromptComposer,
    ) -> None:
        self._engine = engine
        self._history = history
        self._facts = facts
        self._composer = composer
        self._awaiting: set[str] = set()

    def state(self, chat_id: str) -> SessionState:
        if str(chat_id) in self._awaiting:
            return SessionState.AWAITING_REPLY
        return SessionState.IDLE

    async def handle_turn(self, chat_id: str, text: str, sender: str) -> str:
        chat_id = str(chat_id)
        self._history.append(chat_id, "user", f"[{sender}]: {text}")

        self._awaiting.add(chat_id)
        try:
            response = await self._engine.send(
                self._payload(chat_id),
                system_prompt=self._composer.compose(chat_id),
            )
        except EngineError as e:
            logger.error("Model call failed for chat %s: %s", chat_id, e)
            return APOLOGY
        finally:
            self._awaiting.discard(chat_id)

        if response.input_tokens is not None and response.output_tokens is not None:
            logger.info(
                "Chat %s turn: %d in / %d out tokens (%s)",
                chat_id,
                response.input_tokens,
                response.output_tokens,
                response.model or self._engine.name,
            )

        reply = response.text
        self._history.append(chat_id, "assistant", reply)
        self._history.save()

        self._facts.append(chat_id, markers.MEMORY.extract(reply))

        return markers.MEMORY.strip(reply)

    def _payload(self, chat_id: str) -> list[dict]:
        """History as sent to the model; it must open with a user turn."""
        turns = self._history.turns(chat_id)
        while turns and turns[0]["role"] != "user":
            turns.pop(0)
        return turns
