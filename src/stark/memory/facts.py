"""Append-only per-conversation fact memory."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from stark.memory.store import JsonStore

logger = logging.getLogger(__name__)

TABLE = "memory"


class FactLedger:
    """Free-text facts the assistant asked to remember. No dedup, no deletion."""

    def __init__(self, store: JsonStore) -> None:
        self._store = store
        self._data: dict[str, list[str]] = {}
        for chat_id, facts in store.load(TABLE, {}).items():
            if not isinstance(facts, list):
                logger.error("Skipping malformed memory for chat %s", chat_id)
                continue
            self._data[str(chat_id)] = [str(fact) for fact in facts]

    def facts(self, chat_id: str) -> list[str]:
        return list(self._data.get(str(chat_id), []))

    def append(self, chat_id: str, facts: Iterable[str]) -> None:
        new = list(facts)
        if not new:
            return
        self._data.setdefault(str(chat_id), []).extend(new)
        self._store.save(TABLE, self._data)
        logger.info("Remembered %d fact(s) for chat %s", len(new), chat_id)

    def render(self, chat_id: str) -> str:
        """Bullet list of facts, or an empty string when there are none."""
        return "\n".join(f"- {fact}" for fact in self._data.get(str(chat_id), []))
