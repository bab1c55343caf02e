"""Tests for TelegramChannel delivery."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import InputMediaDocument
from telegram.constants import ParseMode

from src.delivery.channels import DeliveryChannel
from src.delivery.telegram_channel import TelegramChannel, mention_html


@pytest.fixture
def bot() -> MagicMock:
    b = MagicMock()
    b.send_message = AsyncMock()
    b.send_document = AsyncMock()
    b.send_media_group = AsyncMock()
    return b


@pytest.fixture
def channel(bot: MagicMock) -> TelegramChannel:
    return TelegramChannel(bot)


def test_name_and_protocol(channel: TelegramChannel) -> None:
    assert channel.name == "telegram"
    assert isinstance(channel, DeliveryChannel)


def test_mention_html_escapes_name() -> None:
    assert mention_html("42", "<Ada>") == '<a href="tg://user?id=42">&lt;Ada&gt;</a>'


def test_mention_html_without_name() -> None:
    assert mention_html("42") == '<a href="tg://user?id=42">user 42</a>'


async def test_anonymous_text_only(channel: TelegramChannel, bot: MagicMock) -> None:
    ok = await channel.deliver("-100123", "hello", [])

    assert ok is True
    bot.send_message.assert_awaited_once_with(chat_id=-100123, text="hello")
    bot.send_document.assert_not_awaited()
    bot.send_media_group.assert_not_awaited()


async def test_attribution_follows_body(channel: TelegramChannel, bot: MagicMock) -> None:
    await channel.deliver("-100123", "hello", [], author_id="42", author_name="Ada")

    assert bot.send_message.await_count == 2
    notice = bot.send_message.await_args_list[1].kwargs
    assert notice["parse_mode"] == ParseMode.HTML
    assert "scheduled by" in notice["text"]
    assert "tg://user?id=42" in notice["text"]


async def test_single_attachment_sent_as_document(channel: TelegramChannel, bot: MagicMock) -> None:
    await channel.deliver("-100123", "hello", ["https://x.io/a.pdf"])

    bot.send_document.assert_awaited_once_with(chat_id=-100123, document="https://x.io/a.pdf")
    bot.send_media_group.assert_not_awaited()


async def test_many_attachments_sent_as_album(channel: TelegramChannel, bot: MagicMock) -> None:
    links = [f"https://x.io/{i}.png" for i in range(10)]
    await channel.deliver("-100123", "hello", links)

    bot.send_media_group.assert_awaited_once()
    media = bot.send_media_group.await_args.kwargs["media"]
    assert len(media) == 10
    assert all(isinstance(m, InputMediaDocument) for m in media)


async def test_username_chat_id_kept_as_string(channel: TelegramChannel, bot: MagicMock) -> None:
    await channel.deliver("@announcements", "hello", [])
    bot.send_message.assert_awaited_once_with(chat_id="@announcements", text="hello")


async def test_empty_body_skips_text(channel: TelegramChannel, bot: MagicMock) -> None:
    await channel.deliver("1", "", ["https://x.io/a.pdf"])
    bot.send_message.assert_not_awaited()
    bot.send_document.assert_awaited_once()


async def test_api_error_returns_false(channel: TelegramChannel, bot: MagicMock) -> None:
    bot.send_message.side_effect = RuntimeError("Forbidden: bot was kicked")
    assert await channel.deliver("1", "hello", []) is False
