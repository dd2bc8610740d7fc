"""Telegram bot initialization and setup."""

from typing import Optional

from aiogram import Bot, Dispatcher
from loguru import logger

from farmedic.bot import handlers
from farmedic.bot.notifier import TelegramNotifier
from farmedic.config import settings
from farmedic.services.schedule_manager import ScheduleManager

# Global bot instance
bot: Optional[Bot] = None
dp: Optional[Dispatcher] = None


def init_bot(schedule_manager: ScheduleManager) -> tuple[Bot, Dispatcher]:
    """Initialize bot and dispatcher, and route reminders to the owner's chat.

    Args:
        schedule_manager: ScheduleManager serving the handlers

    Returns:
        Tuple of (Bot, Dispatcher) instances

    Raises:
        ValueError: If the bot token is not configured
    """
    global bot, dp

    logger.info("Initializing bot...")

    bot = Bot(token=settings.require_bot_token())
    dp = Dispatcher()

    handlers.init_handlers(schedule_manager)
    dp.include_router(handlers.router)

    if settings.owner_chat_id is not None:
        notifier = TelegramNotifier(
            bot, schedule_manager.notification_manager, settings.owner_chat_id
        )
        schedule_manager.notification_manager.add_listener(notifier)
        logger.info(f"Reminders will be sent to chat {settings.owner_chat_id}")
    else:
        logger.warning("OWNER_CHAT_ID not set, reminders will only be logged")

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    logger.info("Bot initialized successfully")

    return bot, dp


async def on_startup():
    """Handler called when bot starts."""
    logger.info("Bot started")
    logger.info(f"Data directory: {settings.data_dir}")

    if bot:
        bot_info = await bot.get_me()
        logger.info(f"Bot username: @{bot_info.username}")


async def on_shutdown():
    """Handler called when bot shuts down."""
    logger.info("Bot shutting down...")
