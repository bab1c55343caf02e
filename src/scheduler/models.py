"""ScheduledMessage data model and the ordered reminder queue."""

from __future__ import annotations

import bisect
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class Destination:
    """Where a scheduled message is delivered.

    Attributes:
        channel: Delivery channel name (e.g. ``"telegram"``).
        chat_id: Chat identifier on that channel.
        server_id: Optional parent (group/server) identifier, display only.
        title: Optional chat title captured at scheduling time, display only.
    """

    channel: str
    chat_id: str
    server_id: str | None = None
    title: str = ""

    @property
    def is_addressable(self) -> bool:
        return bool(self.channel and self.chat_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "chat_id": self.chat_id,
            "server_id": self.server_id,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Destination:
        return cls(
            channel=data.get("channel", ""),
            chat_id=str(data.get("chat_id", "")),
            server_id=data.get("server_id"),
            title=data.get("title") or "",
        )


@dataclass
class ScheduledMessage:
    """A message waiting to be delivered.

    Attributes:
        id: Unique identifier (UUID hex), the only stable handle for deletion.
        owner_id: User who scheduled the message.
        destination: Chat the message will be delivered to.
        body: Message text.
        due_at: Unix timestamp (seconds) of intended delivery.
        attachments: Absolute URLs sent alongside the body.
        anonymous: When False, delivery adds a notice naming the owner.
        owner_name: Display name of the owner at scheduling time.
        created_at: ISO 8601 timestamp.
    """

    id: str
    owner_id: str
    destination: Destination
    body: str
    due_at: int
    attachments: list[str] = field(default_factory=list)
    anonymous: bool = False
    owner_name: str = ""
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(UTC).isoformat()

    def is_due(self, now: int) -> bool:
        return self.due_at <= now

    # -- Serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "destination": self.destination.to_dict(),
            "body": self.body,
            "due_at": self.due_at,
            "attachments": list(self.attachments),
            "anonymous": self.anonymous,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduledMessage:
        return cls(
            id=data["id"],
            owner_id=str(data["owner_id"]),
            destination=Destination.from_dict(data.get("destination") or {}),
            body=data.get("body", ""),
            due_at=int(data["due_at"]),
            attachments=list(data.get("attachments") or []),
            anonymous=bool(data.get("anonymous", False)),
            owner_name=data.get("owner_name") or "",
            created_at=data.get("created_at") or "",
        )


@dataclass
class ReminderQueue:
    """Pending messages, always sorted ascending by ``due_at``."""

    reminders: list[ScheduledMessage] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.reminders)

    def insert(self, message: ScheduledMessage) -> int:
        """Insert after every message due at or before it. Returns the index."""
        index = bisect.bisect_right(self.reminders, message.due_at, key=lambda m: m.due_at)
        self.reminders.insert(index, message)
        return index

    def pop_due(self, now: int) -> list[ScheduledMessage]:
        """Remove and return the leading run of messages due at or before *now*."""
        count = 0
        for message in self.reminders:
            if not message.is_due(now):
                break
            count += 1
        due = self.reminders[:count]
        del self.reminders[:count]
        return due

    def remove(self, message_id: str) -> ScheduledMessage | None:
        for i, message in enumerate(self.reminders):
            if message.id == message_id:
                return self.reminders.pop(i)
        return None

    def find(self, message_id: str) -> ScheduledMessage | None:
        return next((m for m in self.reminders if m.id == message_id), None)

    def for_owner(self, owner_id: str) -> list[ScheduledMessage]:
        return [m for m in self.reminders if m.owner_id == owner_id]

    # -- Serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {"reminders": [m.to_dict() for m in self.reminders]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReminderQueue:
        return cls(
            reminders=[ScheduledMessage.from_dict(item) for item in data.get("reminders", [])]
        )


def make_message_id() -> str:
    """Generate a new scheduled message ID."""
    return uuid.uuid4().hex
