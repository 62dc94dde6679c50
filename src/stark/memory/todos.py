"""Per-conversation to-do list.

Items are addressed by position for display and for the positional commands
the assistant emits, but each one also carries a stable id assigned at
creation time.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date

from stark.memory.store import JsonStore

logger = logging.getLogger(__name__)

TABLE = "todos"

DONE_GLYPH = "✅"
OPEN_GLYPH = "⬜"
EMPTY_LIST = "📋 Geen taken op de lijst!"
EMPTY_PROMPT_LIST = "Geen taken op dit moment."


def format_date(d: date) -> str:
    """Dutch short date, e.g. 19-10-2026."""
    return f"{d.day}-{d.month}-{d.year}"


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class TodoItem:
    text: str
    addedBy: str
    date: str
    done: bool = False
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: dict) -> TodoItem:
        return cls(
            text=data.get("text", ""),
            addedBy=data.get("addedBy", ""),
            date=data.get("date", ""),
            done=bool(data.get("done", False)),
            id=data.get("id") or _new_id(),
        )

    @property
    def glyph(self) -> str:
        return DONE_GLYPH if self.done else OPEN_GLYPH


class TodoLedger:
    """CRUD over each conversation's ordered list of TodoItems."""

    def __init__(self, store: JsonStore) -> None:
        self._store = store
        self._data: dict[str, list[TodoItem]] = {}
        for chat_id, items in store.load(TABLE, {}).items():
            if not isinstance(items, list):
                logger.error("Skipping malformed todo list for chat %s", chat_id)
                continue
            records = [item for item in items if isinstance(item, dict)]
            if len(records) != len(items):
                logger.error("Dropped %d malformed todo(s) for chat %s", len(items) - len(records), chat_id)
            self._data[str(chat_id)] = [TodoItem.from_dict(item) for item in records]

    def items(self, chat_id: str) -> list[TodoItem]:
        return list(self._data.get(str(chat_id), []))

    def add(self, chat_id: str, text: str, added_by: str) -> TodoItem:
        item = TodoItem(text=text, addedBy=added_by, date=format_date(date.today()))
        self._data.setdefault(str(chat_id), []).append(item)
        self.save()
        logger.info("Todo %s added to chat %s by %s", item.id, chat_id, added_by)
        return item

    def complete(self, chat_id: str, index: int) -> bool:
        """Mark the item at zero-based *index* done. False if there is none."""
        item = self._get(chat_id, index)
        if item is None:
            return False
        item.done = True
        self.save()
        return True

    def remove(self, chat_id: str, index: int) -> bool:
        """Delete the item at zero-based *index*. False if there is none."""
        if self._get(chat_id, index) is None:
            return False
        del self._data[str(chat_id)][index]
        self.save()
        return True

    def _get(self, chat_id: str, index: int) -> TodoItem | None:
        items = self._data.get(str(chat_id), [])
        if 0 <= index < len(items):
            return items[index]
        return None

    def render(self, chat_id: str) -> str:
        """Markdown listing for the chat."""
        items = self._data.get(str(chat_id), [])
        if not items:
            return EMPTY_LIST
        lines = [
            f"{i}. {item.glyph} {item.text} _({item.addedBy}, {item.date})_"
            for i, item in enumerate(items, start=1)
        ]
        return "📋 *To-Do Lijst:*\n" + "\n".join(lines)

    def render_for_prompt(self, chat_id: str) -> str:
        items = self._data.get(str(chat_id), [])
        if not items:
            return EMPTY_PROMPT_LIST
        return "\n".join(
            f"{i}. [{item.glyph}] {item.text} (toegevoegd door {item.addedBy} op {item.date})"
            for i, item in enumerate(items, start=1)
        )

    def save(self) -> None:
        self._store.save(
            TABLE,
            {chat_id: [asdict(item) for item in items] for chat_id, items in self._data.items()},
        )
