"""PaginationSession — interactive cursor over one owner's scheduled messages.

A session is opened per ``/messages`` invocation and holds its own snapshot
of the owner's queue. The snapshot is not refreshed on navigation, so a
concurrent session for the same owner can make it stale; deletes re-check
the record by ID before acting.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.config import settings
from src.scheduler.errors import SessionExpiredError

if TYPE_CHECKING:
    from src.scheduler.models import ScheduledMessage
    from src.scheduler.service import ReminderService

logger = logging.getLogger(__name__)


@dataclass
class PaginationSession:
    """Cursor over a snapshot of ``list_by_owner`` with a bounded lifetime."""

    id: str
    owner_id: str
    service: ReminderService
    messages: list[ScheduledMessage]
    index: int | None = None
    timeout: float = field(default_factory=lambda: settings.session_timeout_seconds)
    last_active: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        if self.messages and self.index is None:
            self.index = 0
        self._clamp()

    @classmethod
    async def open(
        cls,
        service: ReminderService,
        owner_id: str,
        *,
        timeout: float | None = None,
    ) -> PaginationSession:
        """Snapshot the owner's queue and register a new session for it.

        Expired sessions are purged first.
        """
        purge_expired()
        messages = await service.list_by_owner(owner_id)
        session = cls(
            id=_generate_session_id(),
            owner_id=str(owner_id),
            service=service,
            messages=messages,
            timeout=settings.session_timeout_seconds if timeout is None else timeout,
        )
        _sessions[session.id] = session
        return session

    # -- State -----------------------------------------------------------------

    @property
    def is_live(self) -> bool:
        return time.monotonic() - self.last_active < self.timeout

    @property
    def current(self) -> ScheduledMessage | None:
        if self.index is None:
            return None
        return self.messages[self.index]

    def __len__(self) -> int:
        return len(self.messages)

    def _clamp(self) -> None:
        if not self.messages:
            self.index = None
        elif self.index is not None:
            self.index = max(0, min(self.index, len(self.messages) - 1))

    def _touch(self) -> None:
        if not self.is_live:
            raise SessionExpiredError(f"Session {self.id} has expired")
        self.last_active = time.monotonic()

    # -- Actions ---------------------------------------------------------------

    def previous(self) -> bool:
        """Move back one message. Returns True if the index changed."""
        self._touch()
        if self.index is not None and self.index > 0:
            self.index -= 1
            return True
        return False

    def next(self) -> bool:
        """Move forward one message. Returns True if the index changed."""
        self._touch()
        if self.index is not None and self.index < len(self.messages) - 1:
            self.index += 1
            return True
        return False

    async def delete(self) -> ScheduledMessage | None:
        """Delete the current message. Returns it, or None if the view is empty."""
        self._touch()
        message = self.current
        if message is None:
            return None

        if await self.service.get(message.id) is None:
            logger.info("Message %s already gone from the queue", message.id)
        else:
            await self.service.delete_by_id(message.id, self.owner_id)

        self.messages.pop(self.index)
        self.index = max(0, self.index - 1)
        self._clamp()
        return message

    def edit(self) -> bool:
        """Editing is not supported yet; acknowledges without changing anything."""
        self._touch()
        return False


# Module-level registry of open sessions keyed by short session ID.
_sessions: dict[str, PaginationSession] = {}


def _generate_session_id() -> str:
    """Return an 8-character hex string suitable for callback data."""
    return uuid.uuid4().hex[:8]


def get_session(session_id: str) -> PaginationSession | None:
    """Return a live session, dropping it (and other expired ones) if stale."""
    purge_expired()
    return _sessions.get(session_id)


def close_session(session_id: str) -> None:
    _sessions.pop(session_id, None)


def purge_expired() -> int:
    """Forget sessions past their timeout. Returns the number removed."""
    expired = [sid for sid, s in _sessions.items() if not s.is_live]
    for sid in expired:
        del _sessions[sid]
    if expired:
        logger.debug("Purged %d expired session(s)", len(expired))
    return len(expired)
