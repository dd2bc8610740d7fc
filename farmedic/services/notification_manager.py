"""Notification manager for farmedic."""

import itertools
import time
from typing import Awaitable, Callable, Optional

from loguru import logger

from farmedic.data.models import Medication, Notification, NotificationType
from farmedic.utils import log_operation

NotificationListener = Callable[[Notification], Awaitable[None]]

MEDICATION_TITLE = "Medication time"
HYDRATION_TITLE = "Time to drink water!"
HYDRATION_MESSAGE = "Have a glass to stay hydrated"


class NotificationManager:
    """Manager for reminder notifications.

    Handles all operations related to surfacing reminders:
    - Building medication and hydration notifications
    - Holding the single active notification
    - Delivering notifications to registered listeners
    - Creating inline keyboard structures for responses
    """

    def __init__(self, snooze_minutes: int = 15):
        """Initialize notification manager.

        Args:
            snooze_minutes: Snooze length shown on reminder buttons
        """
        self.snooze_minutes = snooze_minutes
        self.active_notification: Optional[Notification] = None
        self._listeners: list[NotificationListener] = []
        self._ids = itertools.count(int(time.time() * 1000) % 2**31)
        logger.debug("NotificationManager initialized")

    def add_listener(self, listener: NotificationListener) -> None:
        """Register a coroutine called with every triggered notification."""
        self._listeners.append(listener)

    def remove_listener(self, listener: NotificationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def build_medication_notification(self, medication: Medication) -> Notification:
        return Notification(
            id=next(self._ids),
            title=MEDICATION_TITLE,
            message=f"Time to take {medication.name} {medication.dosage}".rstrip(),
            type=NotificationType.MEDICATION,
            medication_id=medication.id,
        )

    def build_hydration_notification(self) -> Notification:
        return Notification(
            id=next(self._ids),
            title=HYDRATION_TITLE,
            message=HYDRATION_MESSAGE,
            type=NotificationType.HYDRATION,
        )

    async def trigger_medication_notification(self, medication: Medication) -> Notification:
        """Make a medication reminder the active notification and deliver it.

        Args:
            medication: Medication to remind about

        Returns:
            Triggered Notification
        """
        notification = self.build_medication_notification(medication)
        await self._activate(notification)
        return notification

    async def trigger_hydration_notification(self) -> Notification:
        notification = self.build_hydration_notification()
        await self._activate(notification)
        return notification

    def dismiss(self) -> None:
        """Clear the active notification."""
        if self.active_notification is not None:
            logger.debug(f"Dismissing notification {self.active_notification.id}")
        self.active_notification = None

    async def _activate(self, notification: Notification) -> None:
        # A newer reminder replaces whatever is still on screen
        self.active_notification = notification
        log_operation(
            "notification_triggered",
            medication_id=notification.medication_id,
            notification_id=notification.id,
            notification_type=notification.type.value,
        )

        for listener in list(self._listeners):
            try:
                await listener(notification)
            except Exception as e:
                logger.exception(
                    f"Error delivering notification {notification.id}: {type(e).__name__}: {e}"
                )

    def format_reminder_message(self, notification: Notification) -> str:
        """Format reminder message text.

        Format:
            Medication time
            Time to take Ibuprofen 400 mg

        Args:
            notification: Notification to format

        Returns:
            Formatted reminder message
        """
        return f"{notification.title}\n{notification.message}"

    def create_reminder_keyboard(self, notification: Notification) -> dict:
        """Create inline keyboard data structure for a reminder.

        The keyboard structure is returned as a dictionary that can be used
        by the bot layer to create the actual Telegram inline keyboard.

        Structure for a medication reminder:
            {
                "inline_keyboard": [
                    [{"text": "Taken", "callback_data": "taken:1"}],
                    [{"text": "+15 min", "callback_data": "snooze:1"}],
                    [{"text": "Skip", "callback_data": "skip:1"}],
                ]
            }

        Args:
            notification: Notification to answer

        Returns:
            Dictionary with inline keyboard structure
        """
        if notification.type == NotificationType.HYDRATION:
            buttons = [
                {"text": "I drank", "callback_data": "drink"},
                {"text": f"+{self.snooze_minutes} min", "callback_data": "snooze_water"},
            ]
        else:
            medication_id = notification.medication_id
            buttons = [
                {"text": "Taken", "callback_data": f"taken:{medication_id}"},
                {"text": f"+{self.snooze_minutes} min", "callback_data": f"snooze:{medication_id}"},
                {"text": "Skip", "callback_data": f"skip:{medication_id}"},
            ]

        keyboard = {"inline_keyboard": [[button] for button in buttons]}

        logger.debug(f"Created reminder keyboard with {len(buttons)} button(s)")

        return keyboard
