"""Stark orchestrator — the Hub in Hub-and-Spoke architecture.

Responsibilities:
1. Receive messages from any connector (IncomingMessage)
2. Group filter — only react when mentioned or replied to
3. Quick commands — /todos, /help, /reset (no model call)
4. Lane Queue — serialize per chat_id so one turn at a time touches a chat's ledgers
5. Conversation turn — session + to-do side effects from the user text and the reply
6. Return a Reply for the originating connector to deliver
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

from stark import markers
from stark.config import StarkConfig
from stark.connectors.base import IncomingMessage, Reply
from stark.memory.facts import FactLedger
from stark.memory.history import HistoryLedger
from stark.memory.store import JsonStore
from stark.memory.todos import TodoLedger
from stark.prompt import PromptComposer, load_project_context
from stark.session import ConversationSession

if TYPE_CHECKING:
    from stark.connectors.base import Connector
    from stark.engines.base import Engine

logger = logging.getLogger(__name__)

TODO_COMMANDS = ("/todos", "/taken")
HELP_COMMAND = "/help"
RESET_COMMAND = "/reset"

RESET_CONFIRMATION = "🔄 Gespreksgeschiedenis gereset! Mijn geheugen en to-dos zijn bewaard."

# Anchored at the start and colon-terminated, so ordinary sentences that merely
# mention a task do not create one.
TODO_PATTERNS = [
    re.compile(r"^(?:voeg toe|add|nieuwe taak|todo)\s*:\s*(.+)", re.IGNORECASE | re.DOTALL),
    re.compile(r"^(?:taak|task)\s*:\s*(.+)", re.IGNORECASE | re.DOTALL),
]

HELP_TEXT = """\
🤖 *{assistant} - Project Assistent*

Ik ben jullie AI teamlid voor {project}.

*Wat kan ik?*
• Meedenken over het project, features, en beslissingen
• To-do lijst bijhouden (voeg toe, vink af)
• Onthouden wat we bespreken
• Technische vragen beantwoorden over de stack
• Brainstormen over nieuwe features

*Commando's:*
/todos - Toon de to-do lijst
/help - Dit bericht
/reset - Reset gespreksgeschiedenis

*Gebruik:*
{usage}
"""


def detect_todo(text: str) -> str | None:
    """Task text if *text* is an explicit to-do request (first matching pattern)."""
    for pattern in TODO_PATTERNS:
        match = pattern.match(text.strip())
        if match:
            task = match.group(1).strip()
            if task:
                return task
    return None


class Stark:
    """Core orchestrator — routes messages between connectors and the session."""

    def __init__(self, config: StarkConfig, store: JsonStore, engine: Engine) -> None:
        self.config = config
        self.store = store
        self.engine = engine
        self.history = HistoryLedger(store, window=config.history_window)
        self.todos = TodoLedger(store)
        self.facts = FactLedger(store)
        self.composer = PromptComposer(
            self.todos, self.facts, load_project_context(config.context_file)
        )
        self.session = ConversationSession(engine, self.history, self.facts, self.composer)
        self._connectors: dict[str, Connector] = {}
        self._lane_locks: dict[str, asyncio.Lock] = {}  # per-chat serialization
        self._mention_re = re.compile(
            "@" + re.escape(config.telegram.bot_username), re.IGNORECASE
        )

    @property
    def assistant_name(self) -> str:
        return self.composer.context.assistant

    # ── Connector management ─────────────────────────────────

    def add_connector(self, connector: Connector) -> None:
        self._connectors[connector.name] = connector
        logger.info("Registered connector: %s", connector.name)

    # ── Lane Queue (per-chat serialization) ──────────────────

    def _get_lane_lock(self, chat_id: str) -> asyncio.Lock:
        if chat_id not in self._lane_locks:
            self._lane_locks[chat_id] = asyncio.Lock()
        return self._lane_locks[chat_id]

    # ── Message handling (the core loop) ─────────────────────

    async def handle_message(self, msg: IncomingMessage) -> Reply | None:
        """Process an incoming message — the main entry point for all connectors."""
        if msg.is_group and not (self._mention_re.search(msg.text) or msg.reply_to_bot):
            logger.debug("Ignoring group message in chat %s (not addressed)", msg.chat_id)
            return None

        text = self._mention_re.sub("", msg.text).strip()
        if not text:
            return None

        command_reply = await self._handle_command(msg, text)
        if command_reply is not None:
            return command_reply

        lock = self._get_lane_lock(msg.chat_id)
        async with lock:
            return await self._process(msg, text)

    async def _handle_command(self, msg: IncomingMessage, text: str) -> Reply | None:
        command = text.lower()
        if command in TODO_COMMANDS:
            return Reply(self.todos.render(msg.chat_id))
        if command == HELP_COMMAND:
            return Reply(self._help_text(msg.is_group))
        if command == RESET_COMMAND:
            # Waits for an in-flight turn so its reply cannot land in the fresh history
            async with self._get_lane_lock(msg.chat_id):
                self.history.reset(msg.chat_id)
            return Reply(RESET_CONFIRMATION, parse_mode=None)
        return None

    def _help_text(self, is_group: bool) -> str:
        if is_group:
            usage = f"Tag me met @{self.config.telegram.bot_username} of reply op mijn berichten."
        else:
            usage = "Stuur gewoon een bericht!"
        context = self.composer.context
        return HELP_TEXT.format(assistant=context.assistant, project=context.project, usage=usage)

    async def _process(self, msg: IncomingMessage, text: str) -> Reply | None:
        # 1. Typing indicator on the originating connector
        connector = self._connectors.get(msg.connector_name)
        if connector is not None:
            try:
                await connector.send_typing(msg.chat_id)
            except Exception as e:
                logger.warning("Typing indicator failed for chat %s: %s", msg.chat_id, e)

        # 2. Model turn (memory markers already applied and stripped)
        response = await self.session.handle_turn(msg.chat_id, text, msg.sender)

        # 3. Explicit to-do request in the user's own words
        task = detect_todo(text)
        if task:
            self.todos.add(msg.chat_id, task, msg.sender)

        # 4. To-do markers in the reply
        final = self._apply_todo_markers(msg.chat_id, response)
        if not final:
            logger.info("Reply for chat %s was empty after stripping markers", msg.chat_id)
            return None
        return Reply(final)

    def _apply_todo_markers(self, chat_id: str, text: str) -> str:
        for task in markers.TODO_ADD.extract(text):
            self.todos.add(chat_id, task, self.assistant_name)
        for position in markers.TODO_DONE.extract(text):
            if not self.todos.complete(chat_id, int(position) - 1):
                logger.warning("TODO_DONE for missing item %s in chat %s", position, chat_id)
        return markers.strip_markers(text, markers.TODO_ADD, markers.TODO_DONE)

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Start all connectors (each listens for messages)."""
        if not self._connectors:
            raise RuntimeError("No connectors registered. Call add_connector() first.")

        tasks = [connector.start(self.handle_message) for connector in self._connectors.values()]
        await asyncio.gather(*tasks)

    async def stop(self) -> None:
        """Gracefully stop all connectors."""
        for connector in self._connectors.values():
            await connector.stop()
