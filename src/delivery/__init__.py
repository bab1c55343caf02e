"""Delivery of scheduled messages to chat platforms."""

from src.delivery.channels import DeliveryChannel
from src.delivery.router import DeliveryRouter
from src.delivery.telegram_channel import TelegramChannel

__all__ = [
    "DeliveryChannel",
    "DeliveryRouter",
    "TelegramChannel",
]
