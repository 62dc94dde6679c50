"""Telegram connector (long polling via python-telegram-bot).

Every text update — slash commands included — is handed to the router,
which decides whether the bot was addressed and what to do with it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from telegram import Update
from telegram.constants import ChatAction, ChatType
from telegram.error import BadRequest
from telegram.ext import Application, ContextTypes, filters
from telegram.ext import MessageHandler as UpdateHandler

from stark.connectors.base import IncomingMessage, split_message

if TYPE_CHECKING:
    from stark.config import TelegramConfig
    from stark.connectors.base import MessageHandler, Reply

logger = logging.getLogger(__name__)

_GROUP_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)
_UNKNOWN_SENDER = "Onbekend"


def to_incoming(update: Update, bot_id: int | None) -> IncomingMessage | None:
    """Translate a Telegram update into an IncomingMessage (None if not text)."""
    message = update.effective_message
    chat = update.effective_chat
    if message is None or chat is None or not message.text:
        return None

    user = update.effective_user
    sender = (user.first_name or user.username) if user else None

    replied = message.reply_to_message
    reply_to_bot = bool(
        replied is not None
        and replied.from_user is not None
        and bot_id is not None
        and replied.from_user.id == bot_id
    )

    return IncomingMessage(
        text=message.text,
        chat_id=str(chat.id),
        sender=sender or _UNKNOWN_SENDER,
        connector_name="telegram",
        is_group=chat.type in _GROUP_TYPES,
        reply_to_bot=reply_to_bot,
        metadata={"message_id": message.message_id},
    )


class TelegramConnector:
    """Long-polling Telegram connector."""

    def __init__(self, config: TelegramConfig) -> None:
        self._config = config
        self._handler: MessageHandler | None = None
        self._stopped = asyncio.Event()
        # Updates from different chats may interleave; the router serializes per chat.
        self._app = Application.builder().token(config.token).concurrent_updates(True).build()
        self._bot = self._app.bot

    @property
    def name(self) -> str:
        return "telegram"

    def update_handler(self) -> UpdateHandler:
        """Handler for new text messages only (no edits, no channel posts)."""
        return UpdateHandler(filters.TEXT & filters.UpdateType.MESSAGE, self._on_update)

    async def start(self, handler: MessageHandler) -> None:
        self._handler = handler
        self._app.add_handler(self.update_handler())
        self._app.add_error_handler(self._on_error)

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(allowed_updates=[Update.MESSAGE])
        logger.info("Telegram polling started (@%s)", self._config.bot_username)

        await self._stopped.wait()

    async def stop(self) -> None:
        if self._app.updater and self._app.updater.running:
            await self._app.updater.stop()
        if self._app.running:
            await self._app.stop()
        await self._app.shutdown()
        self._stopped.set()
        logger.info("Telegram polling stopped")

    async def _on_update(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        msg = to_incoming(update, context.bot.id)
        if msg is None or self._handler is None:
            return
        try:
            reply = await self._handler(msg)
            if reply is not None:
                await self.reply(msg.chat_id, reply)
        except Exception as e:
            logger.error("Error processing telegram message in chat %s: %s", msg.chat_id, e)

    async def _on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error("Telegram error: %s", context.error)

    async def send_typing(self, chat_id: str) -> None:
        await self._bot.send_chat_action(chat_id=chat_id, action=ChatAction.TYPING)

    async def reply(self, chat_id: str, reply: Reply) -> None:
        """Send a reply in fixed-size chunks, falling back to plain text per chunk."""
        for chunk in split_message(reply.text, self._config.chunk_size):
            try:
                await self._bot.send_message(chat_id=chat_id, text=chunk, parse_mode=reply.parse_mode)
            except BadRequest as e:
                if reply.parse_mode is None:
                    raise
                logger.warning("Formatted send rejected (%s), resending as plain text", e)
                await self._bot.send_message(chat_id=chat_id, text=chunk)
