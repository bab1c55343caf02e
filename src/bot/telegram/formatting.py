"""Rendering of scheduled messages and the /messages keyboard."""

from __future__ import annotations

import html
from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from src.config import settings

if TYPE_CHECKING:
    from src.scheduler.models import ScheduledMessage
    from src.scheduler.session import PaginationSession

EMPTY_LIST_TEXT = (
    "You don't have any scheduled messages. "
    "You can schedule one with the /schedule command!"
)

# Callback data prefix for /messages buttons: "rm:<session_id>:<action>"
CALLBACK_PREFIX = "rm"
ACTIONS = ("edit", "del", "prev", "next")


def _local(epoch: int, timezone: str) -> datetime:
    return datetime.fromtimestamp(epoch, ZoneInfo(timezone))


def format_date(epoch: int, timezone: str) -> str:
    """Format as 'Fri Dec 25 2026'."""
    return _local(epoch, timezone).strftime("%a %b %d %Y")


def format_time(epoch: int, timezone: str) -> str:
    """Format as '09:30 CET'."""
    return _local(epoch, timezone).strftime("%H:%M %Z")


def bold(text: str) -> str:
    return f"<b>{text}</b>"


def describe_chat(message: ScheduledMessage) -> str:
    dest = message.destination
    return html.escape(dest.title) if dest.title else html.escape(dest.chat_id)


def render_message_info(message: ScheduledMessage, timezone: str) -> str:
    """Full description of one scheduled message (HTML)."""
    lines = [
        f"{bold('Date:')} {format_date(message.due_at, timezone)}",
        f"{bold('Time:')} {format_time(message.due_at, timezone)}",
        f"{bold('Chat:')} {describe_chat(message)}",
        f"{bold('Anonymous:')} {'yes' if message.anonymous else 'no'}",
    ]
    if message.attachments:
        lines.append(f"{bold('Attachments:')}")
        lines.extend(html.escape(url) for url in message.attachments)
    lines.extend(["", bold("Message:"), html.escape(message.body)])
    return "\n".join(lines)


def render_session(session: PaginationSession, timezone: str) -> str:
    """Text for the current page of a /messages session (HTML)."""
    current = session.current
    if current is None:
        return EMPTY_LIST_TEXT
    header = f"Currently showing message {session.index + 1} of {len(session)}."
    return f"{header}\n\n{render_message_info(current, timezone)}"


def render_confirmation(message: ScheduledMessage, timezone: str, mention: str) -> str:
    """Reply sent after a successful /schedule (HTML)."""
    text = (
        f"I will send the following message on {format_date(message.due_at, timezone)} "
        f"in this chat at {format_time(message.due_at, timezone)}:\n\n"
        f"{html.escape(message.body)}"
    )
    if not message.anonymous:
        text += f"\n\nThis message was scheduled by {mention}."
    return text


def help_row() -> list[InlineKeyboardButton]:
    if not settings.help_url:
        return []
    return [InlineKeyboardButton(text="Help", url=settings.help_url)]


def help_markup() -> InlineKeyboardMarkup | None:
    row = help_row()
    return InlineKeyboardMarkup([row]) if row else None


def _button(session: PaginationSession, label: str, action: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(
        text=label, callback_data=f"{CALLBACK_PREFIX}:{session.id}:{action}"
    )


def session_markup(session: PaginationSession) -> InlineKeyboardMarkup | None:
    """Edit/Delete plus whichever of Previous/Next can move."""
    if session.current is None:
        return help_markup()

    actions = [_button(session, "Edit", "edit"), _button(session, "Delete", "del")]
    nav = []
    if session.index > 0:
        nav.append(_button(session, "Previous", "prev"))
    if session.index < len(session) - 1:
        nav.append(_button(session, "Next", "next"))

    rows = [actions]
    if nav:
        rows.append(nav)
    row = help_row()
    if row:
        rows.append(row)
    return InlineKeyboardMarkup(rows)
