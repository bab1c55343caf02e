"""ReminderService — create, list, delete and extract scheduled messages."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from src.config import settings
from src.scheduler.models import ScheduledMessage, make_message_id
from src.scheduler.validation import DueDate, resolve_due_time, validate_schedule

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from src.scheduler.models import Destination, ReminderQueue
    from src.scheduler.store import ReminderStore

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(time.time())


class ReminderService:
    """Record lifecycle over the reminder queue.

    Every mutation is one load/mutate/commit cycle run under ``self._lock``
    so concurrent handlers and the dispatch sweep never commit from a stale
    snapshot.

    Args:
        store: ReminderStore for persistence.
        timezone: IANA timezone used to interpret ``DueDate`` values.
    """

    def __init__(self, store: ReminderStore, timezone: str | None = None) -> None:
        self._store = store
        self._timezone = timezone or settings.scheduler_timezone
        self._lock = asyncio.Lock()

    @property
    def timezone(self) -> str:
        return self._timezone

    @asynccontextmanager
    async def _mutate(self) -> AsyncIterator[ReminderQueue]:
        """Yield a freshly loaded queue and commit it if the block succeeds."""
        async with self._lock:
            queue = self._store.load()
            yield queue
            self._store.commit(queue)

    # -- Create ----------------------------------------------------------------

    async def schedule(
        self,
        owner_id: str,
        destination: Destination | None,
        body: str,
        when: int | DueDate,
        attachments: Sequence[str] = (),
        *,
        anonymous: bool = False,
        owner_name: str = "",
        now: int | None = None,
    ) -> ScheduledMessage:
        """Validate and enqueue a new message. Returns the stored record.

        Raises a ``ScheduleValidationError`` subclass without touching the
        store when the request is rejected, and ``StoreError`` if the queue
        cannot be persisted.
        """
        now = _now() if now is None else now
        due_at = (
            resolve_due_time(when, now=now, timezone=self._timezone)
            if isinstance(when, DueDate)
            else int(when)
        )
        validate_schedule(
            due_at=due_at,
            now=now,
            body=body,
            attachments=attachments,
            destination=destination,
            max_body_length=settings.max_body_length,
            max_attachments=settings.max_attachments,
        )

        message = ScheduledMessage(
            id=make_message_id(),
            owner_id=str(owner_id),
            destination=destination,
            body=body,
            due_at=due_at,
            attachments=list(attachments),
            anonymous=anonymous,
            owner_name=owner_name,
        )
        async with self._mutate() as queue:
            while queue.find(message.id) is not None:
                message.id = make_message_id()
            position = queue.insert(message)

        logger.info(
            "Scheduled message %s for owner=%s due_at=%d (position %d of %d)",
            message.id,
            message.owner_id,
            message.due_at,
            position + 1,
            len(queue),
        )
        return message

    # -- Read ------------------------------------------------------------------

    async def list_by_owner(self, owner_id: str) -> list[ScheduledMessage]:
        """Return the owner's pending messages in delivery order."""
        async with self._lock:
            queue = self._store.load()
        return queue.for_owner(str(owner_id))

    async def get(self, message_id: str) -> ScheduledMessage | None:
        """Fetch a pending message by ID, or None if it is gone."""
        async with self._lock:
            queue = self._store.load()
        return queue.find(message_id)

    # -- Delete ----------------------------------------------------------------

    async def delete_by_id(self, message_id: str, owner_id: str) -> bool:
        """Remove a pending message owned by *owner_id*.

        Unknown IDs and messages belonging to someone else are left alone.
        Returns True if a message was removed.
        """
        async with self._lock:
            queue = self._store.load()
            message = queue.find(message_id)
            if message is None:
                logger.debug("Delete of unknown message %s ignored", message_id)
                return False
            if message.owner_id != str(owner_id):
                logger.warning(
                    "Owner %s attempted to delete message %s owned by %s",
                    owner_id,
                    message_id,
                    message.owner_id,
                )
                return False
            queue.remove(message_id)
            self._store.commit(queue)

        logger.info("Deleted message %s for owner=%s", message_id, owner_id)
        return True

    # -- Dispatch --------------------------------------------------------------

    async def extract_due(self, now: int | None = None) -> list[ScheduledMessage]:
        """Remove and return every message due at or before *now*, in order."""
        now = _now() if now is None else now
        async with self._lock:
            queue = self._store.load()
            due = queue.pop_due(now)
            if due:
                self._store.commit(queue)
        return due
