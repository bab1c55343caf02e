"""DeliveryChannel protocol — interface for chat platforms that deliver messages."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class DeliveryChannel(Protocol):
    """Protocol that all delivery channels must satisfy."""

    @property
    def name(self) -> str:
        """Unique channel identifier (e.g. 'telegram')."""
        ...

    async def deliver(
        self,
        chat_id: str,
        body: str,
        attachments: list[str],
        *,
        author_id: str | None = None,
        author_name: str = "",
    ) -> bool:
        """Send a scheduled message and its attachments. Returns True on success.

        When *author_id* is given, a follow-up notice names the user who
        scheduled the message.
        """
        ...
