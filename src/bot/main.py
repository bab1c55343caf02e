"""Bot entry point."""

import logging

from src.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Start the bot on Telegram."""
    from src.bot.telegram.app import create_app

    if not settings.telegram_bot_token:
        logger.error("TELEGRAM_BOT_TOKEN is not set")
        raise SystemExit(1)

    logger.info(
        "Starting scheduled message bot (store=%s, tz=%s)...",
        settings.data_store_path,
        settings.scheduler_timezone,
    )
    app = create_app()
    app.run_polling()


if __name__ == "__main__":
    main()
