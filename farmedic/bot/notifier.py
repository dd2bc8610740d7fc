"""Delivery of reminder notifications to Telegram."""

from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError, TelegramNotFound
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from loguru import logger

from farmedic.data.models import Notification
from farmedic.services.notification_manager import NotificationManager
from farmedic.utils import log_operation


def build_inline_keyboard(keyboard_data: dict) -> InlineKeyboardMarkup:
    """Convert keyboard dictionary structure to an aiogram keyboard."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=button["text"], callback_data=button["callback_data"])
                for button in row
            ]
            for row in keyboard_data["inline_keyboard"]
        ]
    )


class TelegramNotifier:
    """Notification listener that sends reminders to the owner's chat.

    Only the latest reminder message is kept in the chat: when a new one is
    sent the previous message is deleted.
    """

    def __init__(self, bot: Bot, notification_manager: NotificationManager, chat_id: int):
        """Initialize notifier.

        Args:
            bot: Telegram Bot instance
            notification_manager: NotificationManager for formatting
            chat_id: Chat that receives reminders
        """
        self.bot = bot
        self.notification_manager = notification_manager
        self.chat_id = chat_id
        self.last_message_id: Optional[int] = None

    async def __call__(self, notification: Notification) -> None:
        await self.send_reminder(notification)

    async def send_reminder(self, notification: Notification) -> None:
        """Send reminder message with inline keyboard.

        Args:
            notification: Notification to deliver
        """
        text = self.notification_manager.format_reminder_message(notification)
        keyboard = build_inline_keyboard(
            self.notification_manager.create_reminder_keyboard(notification)
        )

        try:
            if self.last_message_id is not None:
                await self.delete_previous_reminder(self.last_message_id)

            message = await self.bot.send_message(
                chat_id=self.chat_id,
                text=text,
                reply_markup=keyboard,
            )
            self.last_message_id = message.message_id

            log_operation(
                "reminder_sent",
                medication_id=notification.medication_id,
                notification_type=notification.type.value,
                message_id=message.message_id,
            )

        except TelegramForbiddenError as e:
            logger.warning(f"Chat {self.chat_id} blocked the bot: {e}")
        except TelegramNotFound as e:
            logger.warning(f"Chat {self.chat_id} not found: {e}")
        except TelegramBadRequest as e:
            logger.error(f"Bad request when sending reminder to chat {self.chat_id}: {e}")

    async def delete_previous_reminder(self, message_id: int) -> None:
        """Delete previous reminder message.

        Args:
            message_id: Message ID to delete
        """
        self.last_message_id = None
        try:
            await self.bot.delete_message(chat_id=self.chat_id, message_id=message_id)
            logger.info(f"Deleted previous reminder message {message_id}")
        except TelegramBadRequest as e:
            logger.warning(f"Could not delete message {message_id}: {e}")
