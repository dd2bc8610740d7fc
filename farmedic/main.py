"""Main entry point for farmedic."""

import asyncio
import signal
import sys

from farmedic.bot.bot import init_bot
from farmedic.config import settings
from farmedic.data.models import Notification
from farmedic.data.storage import DataManager
from farmedic.services.notification_manager import NotificationManager
from farmedic.services.schedule_manager import ScheduleManager
from farmedic.utils import logger, setup_logger


async def log_notification(notification: Notification) -> None:
    """Notification listener that writes every reminder to the log."""
    logger.info(f"🔔 {notification.title}: {notification.message}")


async def main():
    """Main application entry point."""
    setup_logger(console_level=settings.log_level)

    logger.info("=" * 60)
    logger.info("Starting Farmedic")
    logger.info("=" * 60)
    logger.info(repr(settings))

    data_manager = DataManager(settings.data_dir)
    notification_manager = NotificationManager(snooze_minutes=settings.snooze_minutes)
    notification_manager.add_listener(log_notification)
    schedule_manager = ScheduleManager(data_manager, notification_manager)

    try:
        bot, dp = init_bot(schedule_manager)
    except ValueError as e:
        logger.error(f"Failed to initialize bot: {e}")
        sys.exit(1)

    # Restore reminders armed before the last shutdown
    await schedule_manager.start()

    shutdown_event = asyncio.Event()

    def signal_handler(sig, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {sig}, initiating graceful shutdown...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Starting bot polling...")
    polling_task = asyncio.create_task(
        dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types(), handle_signals=False)
    )

    try:
        await shutdown_event.wait()
        logger.info("Shutdown signal received, stopping services...")
    finally:
        await schedule_manager.stop()

        await dp.stop_polling()
        polling_task.cancel()
        try:
            await polling_task
        except asyncio.CancelledError:
            pass
        logger.info("Bot polling stopped")

        await bot.session.close()
        logger.info("Bot session closed")

    logger.info("=" * 60)
    logger.info("Farmedic stopped")
    logger.info("=" * 60)


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received KeyboardInterrupt, exiting...")


if __name__ == "__main__":
    run()
