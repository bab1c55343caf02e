"""Telegram command and callback handlers for scheduling messages."""

from __future__ import annotations

import contextlib
import html
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from telegram.constants import ParseMode

from src.bot.telegram.formatting import (
    ACTIONS,
    CALLBACK_PREFIX,
    help_markup,
    render_confirmation,
    render_session,
    session_markup,
)
from src.config import settings
from src.delivery.telegram_channel import mention_html
from src.scheduler.errors import ScheduleValidationError, SessionExpiredError, StoreError
from src.scheduler.models import Destination
from src.scheduler.session import PaginationSession, close_session, get_session
from src.scheduler.validation import DueDate

if TYPE_CHECKING:
    from telegram import Update
    from telegram.ext import ContextTypes

    from src.scheduler.service import ReminderService

logger = logging.getLogger(__name__)

USAGE = (
    "Usage: /schedule D/M[/YYYY] H:MM [anon] message\n"
    "Add a last line \"links: <url> <url>\" to attach up to 10 links.\n\n"
    "Example: /schedule 24/12 18:00 Happy holidays everyone!"
)

_SCHEDULE_RE = re.compile(
    r"^\s*(?P<day>\d{1,2})/(?P<month>\d{1,2})(?:/(?P<year>\d{4}))?"
    r"\s+(?P<hour>\d{1,2}):(?P<minute>\d{1,2})"
    r"(?:\s+(?P<rest>.*))?$",
    re.DOTALL,
)
_LINKS_PREFIX = "links:"

STORE_FAILURE_TEXT = "Couldn't update your messages, try again later."

# Set by init_handlers() during bot startup.
_service: ReminderService | None = None


def init_handlers(service: ReminderService) -> None:
    """Wire the reminder service into the handlers.

    Called once during bot startup, after the service is constructed.
    """
    global _service  # noqa: PLW0603
    _service = service


def _get_service() -> ReminderService:
    if _service is None:
        msg = "Reminder service not initialised: call init_handlers() first"
        raise RuntimeError(msg)
    return _service


# -- Argument parsing ----------------------------------------------------------


class CommandFormatError(ValueError):
    """The /schedule arguments could not be parsed."""


@dataclass
class ScheduleCommand:
    due: DueDate
    body: str
    attachments: list[str] = field(default_factory=list)
    anonymous: bool = False


def parse_schedule_args(text: str) -> ScheduleCommand:
    """Parse the text following ``/schedule``.

    Numbers are only checked for shape here; range and calendar checks are
    left to the reminder service so errors come back in a consistent order.
    """
    match = _SCHEDULE_RE.match(text or "")
    if match is None:
        raise CommandFormatError(USAGE)

    rest = (match.group("rest") or "").strip()
    anonymous = False
    words = rest.split(maxsplit=1)
    if words and words[0].lower() == "anon":
        anonymous = True
        rest = words[1].strip() if len(words) > 1 else ""

    attachments: list[str] = []
    lines = rest.split("\n")
    if lines and lines[-1].strip().lower().startswith(_LINKS_PREFIX):
        attachments = lines.pop().strip()[len(_LINKS_PREFIX) :].split()
        rest = "\n".join(lines).strip()

    if not rest:
        raise CommandFormatError(USAGE)

    year = match.group("year")
    return ScheduleCommand(
        due=DueDate(
            month=int(match.group("month")),
            day=int(match.group("day")),
            hour=int(match.group("hour")),
            minute=int(match.group("minute")),
            year=int(year) if year else None,
        ),
        body=rest,
        attachments=attachments,
        anonymous=anonymous,
    )


def _command_args(update: Update) -> str:
    """Everything after the command word, preserving newlines."""
    text = update.message.text or ""
    parts = text.split(maxsplit=1)
    return parts[1] if len(parts) > 1 else ""


# -- Audit ---------------------------------------------------------------------


async def _audit(update: Update, context: ContextTypes.DEFAULT_TYPE, command: str) -> None:
    """Post a notice about a command use to the audit chat, if configured."""
    chat_id = settings.get_audit_chat_id()
    if chat_id is None:
        return
    user = update.effective_user
    chat = update.effective_chat
    lines = [
        "<b>Command used</b>",
        f"Command: /{html.escape(command)}",
        f"User: {html.escape(user.full_name) if user else '?'}",
        f"User ID: {user.id if user else '?'}",
        f"Chat: {html.escape(chat.title or str(chat.id)) if chat else '?'}",
    ]
    try:
        await context.bot.send_message(
            chat_id=chat_id, text="\n".join(lines), parse_mode=ParseMode.HTML
        )
    except Exception:
        logger.exception("Failed to post audit notice for /%s", command)


# -- Commands ------------------------------------------------------------------


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — explain the commands."""
    await _audit(update, context, "start")
    await update.message.reply_text(
        "I deliver messages later.\n\n"
        f"{USAGE}\n\n"
        "Use /messages to page through and delete your scheduled messages.",
        reply_markup=help_markup(),
    )


async def handle_schedule(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /schedule — validate and enqueue a message for this chat."""
    await _audit(update, context, "schedule")
    try:
        command = parse_schedule_args(_command_args(update))
    except CommandFormatError as exc:
        await update.message.reply_text(str(exc), reply_markup=help_markup())
        return

    service = _get_service()
    user = update.effective_user
    chat = update.effective_chat
    destination = (
        Destination(
            channel="telegram",
            chat_id=str(chat.id),
            title=chat.title or chat.full_name or "",
        )
        if chat is not None
        else None
    )

    try:
        message = await service.schedule(
            owner_id=str(user.id),
            destination=destination,
            body=command.body,
            when=command.due,
            attachments=command.attachments,
            anonymous=command.anonymous,
            owner_name=user.full_name,
        )
    except ScheduleValidationError as exc:
        await update.message.reply_text(str(exc), reply_markup=help_markup())
        return
    except StoreError:
        logger.exception("Could not save scheduled message for user %s", user.id)
        await update.message.reply_text(
            "Sorry, I couldn't save your message. Please try again later."
        )
        return

    await update.message.reply_text(
        render_confirmation(message, service.timezone, mention_html(str(user.id), user.full_name)),
        parse_mode=ParseMode.HTML,
    )


async def handle_messages(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /messages — open a paging session over the user's messages."""
    await _audit(update, context, "messages")
    service = _get_service()
    user_id = update.effective_user.id
    try:
        session = await PaginationSession.open(service, str(user_id))
    except StoreError:
        logger.exception("Could not load scheduled messages for user %s", user_id)
        await update.message.reply_text(STORE_FAILURE_TEXT)
        return
    await update.message.reply_text(
        render_session(session, service.timezone),
        parse_mode=ParseMode.HTML,
        reply_markup=session_markup(session),
    )
    # Nothing to page through; no buttons reference the session.
    if session.current is None:
        close_session(session.id)


# -- Callbacks -----------------------------------------------------------------


async def handle_callback_query(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle inline-keyboard callbacks from /messages lists."""
    query = update.callback_query
    data = query.data or ""

    parts = data.split(":")
    if len(parts) != 3 or parts[0] != CALLBACK_PREFIX or parts[2] not in ACTIONS:
        await query.answer("Invalid callback data.")
        return
    _, session_id, action = parts

    session = get_session(session_id)
    if session is None:
        await _expire(query)
        return
    if str(query.from_user.id) != session.owner_id:
        await query.answer("This list belongs to someone else.")
        return

    try:
        notice = await _apply_action(session, action)
    except SessionExpiredError:
        close_session(session_id)
        await _expire(query)
        return
    except StoreError:
        logger.exception("Could not apply %s to session %s", action, session_id)
        await query.answer(STORE_FAILURE_TEXT)
        return

    service = _get_service()
    with contextlib.suppress(Exception):
        await query.edit_message_text(
            text=render_session(session, service.timezone),
            parse_mode=ParseMode.HTML,
            reply_markup=session_markup(session),
        )
    if session.current is None:
        close_session(session_id)
    await query.answer(notice)


async def _apply_action(session: PaginationSession, action: str) -> str | None:
    """Run a button action against the session. Returns a toast text, if any."""
    if action == "prev":
        session.previous()
        return None
    if action == "next":
        session.next()
        return None
    if action == "edit":
        session.edit()
        return "Message editing coming soon!"
    removed = await session.delete()
    if removed is None:
        return "Nothing to delete."
    preview = removed.body if len(removed.body) <= 150 else removed.body[:147] + "..."
    return f"Deleted: {preview}"


async def _expire(query) -> None:
    await query.answer("This list has expired. Run /messages again.")
    with contextlib.suppress(Exception):
        await query.edit_message_text(text=query.message.text + "\n\n(expired)")
