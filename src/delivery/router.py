"""DeliveryRouter — singleton that hands scheduled messages to registered channels."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from src.config import settings

if TYPE_CHECKING:
    from src.delivery.channels import DeliveryChannel
    from src.scheduler.models import ScheduledMessage

logger = logging.getLogger(__name__)


class DeliveryRouter:
    """Routes due messages to the channel named by their destination.

    Singleton accessed via ``DeliveryRouter.get()``.
    """

    _instance: DeliveryRouter | None = None

    def __init__(self, timeout: float | None = None) -> None:
        self._channels: dict[str, DeliveryChannel] = {}
        self._default: str = ""
        self._timeout = timeout if timeout is not None else settings.delivery_timeout_seconds

    @classmethod
    def get(cls) -> DeliveryRouter:
        """Return the singleton instance, creating it if needed."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset singleton — for tests only."""
        cls._instance = None

    def register_channel(self, channel: DeliveryChannel) -> None:
        """Register a delivery channel. Raises ValueError on duplicate name."""
        if channel.name in self._channels:
            msg = f"Channel '{channel.name}' is already registered"
            raise ValueError(msg)
        self._channels[channel.name] = channel

    def set_default_channel(self, name: str) -> None:
        """Set the default channel by name. Raises KeyError if not registered."""
        if name not in self._channels:
            msg = f"Channel '{name}' is not registered"
            raise KeyError(msg)
        self._default = name

    def list_channels(self) -> list[str]:
        """Return names of all registered channels."""
        return list(self._channels.keys())

    @property
    def default_channel_name(self) -> str:
        return self._default

    def _resolve_channel(self, name: str | None) -> DeliveryChannel | None:
        """Resolve a channel: explicit name → default → only registered channel."""
        if name:
            return self._channels.get(name)
        if self._default:
            return self._channels.get(self._default)
        if len(self._channels) == 1:
            return next(iter(self._channels.values()))
        return None

    async def deliver(self, message: ScheduledMessage) -> bool:
        """Deliver one scheduled message. Never raises; returns True on success."""
        destination = message.destination
        ch = self._resolve_channel(destination.channel)
        if ch is None:
            logger.warning(
                "No channel resolved for message %s (requested=%s)",
                message.id,
                destination.channel,
            )
            return False

        try:
            delivered = await asyncio.wait_for(
                ch.deliver(
                    destination.chat_id,
                    message.body,
                    list(message.attachments),
                    author_id=None if message.anonymous else message.owner_id,
                    author_name=message.owner_name,
                ),
                timeout=self._timeout,
            )
        except TimeoutError:
            logger.error(
                "Delivery of message %s to %s:%s timed out after %.0fs",
                message.id,
                ch.name,
                destination.chat_id,
                self._timeout,
            )
            return False
        except Exception:
            logger.exception(
                "Delivery of message %s to %s:%s failed",
                message.id,
                ch.name,
                destination.chat_id,
            )
            return False

        if not delivered:
            logger.warning(
                "Channel %s reported failure for message %s", ch.name, message.id
            )
        return delivered
