"""Bounded per-conversation turn history."""

from __future__ import annotations

import logging
from typing import Literal

from stark.memory.store import JsonStore

logger = logging.getLogger(__name__)

TABLE = "conversations"
DEFAULT_WINDOW = 50

Role = Literal["user", "assistant"]


class HistoryLedger:
    """Sliding window of the most recent turns for each conversation.

    Truncation always drops from the front, so the stored list is the most
    recent ``window`` turns in their original order.
    """

    def __init__(self, store: JsonStore, window: int = DEFAULT_WINDOW) -> None:
        if window < 1:
            raise ValueError(f"window must be positive, got {window}")
        self._store = store
        self.window = window
        self._data: dict[str, list[dict]] = {}
        for chat_id, turns in store.load(TABLE, {}).items():
            if not isinstance(turns, list):
                logger.error("Skipping malformed history for chat %s", chat_id)
                continue
            self._data[str(chat_id)] = [
                t for t in turns if isinstance(t, dict) and {"role", "content"} <= t.keys()
            ]

    def turns(self, chat_id: str) -> list[dict]:
        return [dict(turn) for turn in self._data.get(str(chat_id), [])]

    def append(self, chat_id: str, role: Role, content: str) -> None:
        turns = self._data.setdefault(str(chat_id), [])
        turns.append({"role": role, "content": content})
        if len(turns) > self.window:
            del turns[: len(turns) - self.window]

    def reset(self, chat_id: str) -> None:
        self._data[str(chat_id)] = []
        self.save()
        logger.info("History reset for chat %s", chat_id)

    def save(self) -> None:
        self._store.save(TABLE, self._data)
