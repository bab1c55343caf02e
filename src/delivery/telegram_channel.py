"""Telegram implementation of the DeliveryChannel protocol."""

from __future__ import annotations

import html
import logging

import telegram
from telegram import InputMediaDocument
from telegram.constants import ParseMode

logger = logging.getLogger(__name__)


def _chat_ref(chat_id: str) -> int | str:
    """Numeric chat IDs go to the API as ints; ``@channel`` names stay strings."""
    return int(chat_id) if chat_id.lstrip("-").isdigit() else chat_id


def mention_html(user_id: str, name: str = "") -> str:
    """Return an HTML mention that links to the Telegram user."""
    label = html.escape(name) if name else f"user {html.escape(user_id)}"
    return f'<a href="tg://user?id={html.escape(user_id)}">{label}</a>'


class TelegramChannel:
    """Delivers scheduled messages via the Telegram Bot API."""

    def __init__(self, bot: telegram.Bot) -> None:
        self._bot = bot

    @property
    def name(self) -> str:
        return "telegram"

    async def deliver(
        self,
        chat_id: str,
        body: str,
        attachments: list[str],
        *,
        author_id: str | None = None,
        author_name: str = "",
    ) -> bool:
        """Send the body, then attachments by URL, then the attribution notice."""
        chat = _chat_ref(chat_id)
        try:
            if body:
                await self._bot.send_message(chat_id=chat, text=body)
            await self._send_attachments(chat, attachments)
            if author_id is not None:
                await self._bot.send_message(
                    chat_id=chat,
                    text=f"This message was scheduled by {mention_html(author_id, author_name)}.",
                    parse_mode=ParseMode.HTML,
                )
            return True
        except Exception:
            logger.exception("TelegramChannel.deliver failed for chat_id=%s", chat_id)
            return False

    async def _send_attachments(self, chat: int | str, attachments: list[str]) -> None:
        if not attachments:
            return
        if len(attachments) == 1:
            await self._bot.send_document(chat_id=chat, document=attachments[0])
            return
        # Telegram albums hold 2-10 items.
        for start in range(0, len(attachments), 10):
            batch = attachments[start : start + 10]
            if len(batch) == 1:
                await self._bot.send_document(chat_id=chat, document=batch[0])
            else:
                await self._bot.send_media_group(
                    chat_id=chat,
                    media=[InputMediaDocument(media=url) for url in batch],
                )
