"""Urgency and hydration status classification."""

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from .timing import parse_clock_time


class UrgencyTier(str, Enum):
    """How close the next dose is, most urgent first."""

    OVERDUE = "overdue"
    IMMINENT = "imminent"
    SOON = "soon"
    LATER = "later"
    SCHEDULED = "scheduled"


@dataclass(frozen=True)
class UrgencyStatus:
    tier: UrgencyTier
    label: str
    color: str


@dataclass(frozen=True)
class HydrationStatus:
    label: str
    color: str
    message: str
    progress: float


IMMINENT_MINUTES = 15
SOON_MINUTES = 60
LATER_MINUTES = 180

# Ordered by rank, lower is more urgent
URGENCY_ORDER = list(UrgencyTier)


def _minutes_or_midnight(time_str: str) -> int:
    try:
        return parse_clock_time(time_str)
    except ValueError:
        logger.warning(f"Unparsable clock time {time_str!r}, treating as 00:00")
        return 0


def classify_urgency(next_dose: str, current_time: str) -> UrgencyStatus:
    """Classify how urgent the next dose is.

    Compares two times of day only; a dose after midnight seen late in
    the evening counts as overdue.

    Args:
        next_dose: Next dose time in "HH:MM" format
        current_time: Current time in "HH:MM" format

    Returns:
        UrgencyStatus with tier, display label and color tag
    """
    diff = _minutes_or_midnight(next_dose) - _minutes_or_midnight(current_time)

    if diff <= 0:
        return UrgencyStatus(UrgencyTier.OVERDUE, "Time to take!", "#E74C3C")
    if diff <= IMMINENT_MINUTES:
        return UrgencyStatus(UrgencyTier.IMMINENT, "Very soon", "#F39C12")
    if diff <= SOON_MINUTES:
        return UrgencyStatus(UrgencyTier.SOON, f"In {diff} minutes", "#3498DB")
    if diff <= LATER_MINUTES:
        return UrgencyStatus(
            UrgencyTier.LATER, f"In {diff // 60}h {diff % 60}min", "#27AE60"
        )
    return UrgencyStatus(UrgencyTier.SCHEDULED, "Scheduled", "#95A5A6")


def hydration_status(intake: int, goal: int) -> HydrationStatus:
    """Describe hydration progress towards the daily goal.

    Examples:
        >>> hydration_status(4, 8).label
        'Good progress'
    """
    progress = intake / max(goal, 1)

    if progress >= 1:
        return HydrationStatus("Goal reached!", "#27AE60", "Excellent work today!", progress)
    if progress >= 0.75:
        return HydrationStatus("Well hydrated", "#3498DB", "Almost at your goal", progress)
    if progress >= 0.5:
        return HydrationStatus("Good progress", "#F39C12", "You're on the right track", progress)
    if progress >= 0.25:
        return HydrationStatus("Keep drinking", "#E67E22", "Stay hydrated", progress)
    return HydrationStatus("Needs more water", "#E74C3C", "Your body needs water", progress)


def hydration_progress_text(intake: int, goal: int, glass_volume_ml: int = 250) -> str:
    """Litres drunk over litres targeted, e.g. "1.0/2.0L"."""
    litres_per_glass = glass_volume_ml / 1000
    return f"{intake * litres_per_glass:.1f}/{goal * litres_per_glass:.1f}L"
