"""Reminder services for farmedic."""

from .notification_manager import NotificationManager
from .reminder_timer import ReminderTimers
from .schedule_manager import HistorySummary, ScheduleManager

__all__ = [
    "HistorySummary",
    "NotificationManager",
    "ReminderTimers",
    "ScheduleManager",
]
