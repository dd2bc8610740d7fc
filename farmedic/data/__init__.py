"""Data layer for farmedic.

This module provides data models and storage management for the app state.
"""

from .models import AppState, HistoryItem, HydrationState, Medication, Notification, NotificationType
from .storage import DataManager

__all__ = [
    "AppState",
    "HistoryItem",
    "HydrationState",
    "Medication",
    "Notification",
    "NotificationType",
    "DataManager",
]
