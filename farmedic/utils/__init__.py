"""Utility functions for farmedic."""

from .errors import format_error_for_user, log_operation
from .logger import logger, setup_logger
from .status import (
    HydrationStatus,
    UrgencyStatus,
    UrgencyTier,
    classify_urgency,
    hydration_progress_text,
    hydration_status,
)
from .timing import (
    format_clock_time,
    format_time_since,
    generate_dose_times,
    hydration_interval_minutes,
    next_dose_after,
    parse_clock_time,
    reminder_interval_seconds,
)

__all__ = [
    # Timing utilities
    "parse_clock_time",
    "format_clock_time",
    "format_time_since",
    "generate_dose_times",
    "next_dose_after",
    "reminder_interval_seconds",
    "hydration_interval_minutes",
    # Status classification
    "UrgencyTier",
    "UrgencyStatus",
    "HydrationStatus",
    "classify_urgency",
    "hydration_status",
    "hydration_progress_text",
    # Logger utilities
    "setup_logger",
    "logger",
    # Error handling utilities
    "format_error_for_user",
    "log_operation",
]
