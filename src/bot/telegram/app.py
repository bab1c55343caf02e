"""Telegram application factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram.ext import Application, CallbackQueryHandler, CommandHandler

from src.bot.telegram.formatting import CALLBACK_PREFIX
from src.bot.telegram.handlers import (
    handle_callback_query,
    handle_messages,
    handle_schedule,
    handle_start,
    init_handlers,
)
from src.config import settings
from src.delivery.router import DeliveryRouter
from src.delivery.telegram_channel import TelegramChannel

if TYPE_CHECKING:
    from src.scheduler.engine import DispatchSweep

logger = logging.getLogger(__name__)

# Module-level reference so post_shutdown can access it.
_sweep: DispatchSweep | None = None


def _init_delivery(app: Application) -> None:
    """Register delivery channels and set the default."""
    router = DeliveryRouter.get()
    router.register_channel(TelegramChannel(app.bot))
    router.set_default_channel(settings.default_delivery_channel)
    logger.info(
        "Delivery initialized: channels=%s, default=%s",
        router.list_channels(),
        router.default_channel_name,
    )


def _init_scheduler() -> DispatchSweep:
    """Create the reminder service and sweep, and wire them into the handlers."""
    from src.scheduler.engine import DispatchSweep
    from src.scheduler.service import ReminderService
    from src.scheduler.store import ReminderStore

    service = ReminderService(store=ReminderStore.get())
    init_handlers(service)
    return DispatchSweep(service=service, router=DeliveryRouter.get())


async def _post_init(app: Application) -> None:
    """Called after the Application is fully initialized (event loop running)."""
    global _sweep  # noqa: PLW0603
    _sweep = _init_scheduler()
    await _sweep.start()


async def _post_shutdown(app: Application) -> None:
    """Called during graceful shutdown."""
    if _sweep is not None:
        await _sweep.stop()


def create_app() -> Application:
    """Build and configure the Telegram application."""
    app = Application.builder().token(settings.telegram_bot_token).concurrent_updates(True).build()

    _init_delivery(app)

    app.add_handler(CommandHandler("start", handle_start))
    app.add_handler(CommandHandler("help", handle_start))
    app.add_handler(CommandHandler("schedule", handle_schedule))
    app.add_handler(CommandHandler("messages", handle_messages))
    app.add_handler(CallbackQueryHandler(handle_callback_query, pattern=rf"^{CALLBACK_PREFIX}:"))

    # Sweep lifecycle hooks
    app.post_init = _post_init
    app.post_shutdown = _post_shutdown

    return app
