"""Clock-time utility functions for farmedic."""

from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

MINUTES_PER_DAY = 24 * 60
TIME_FORMAT = "%H:%M"


def parse_clock_time(time_str: str) -> int:
    """Parse "HH:MM" string to minutes since midnight.

    Args:
        time_str: Time in "HH:MM" format

    Returns:
        Minutes since midnight

    Raises:
        ValueError: If time string format is invalid

    Examples:
        >>> parse_clock_time("08:30")
        510
    """
    try:
        hours_str, minutes_str = time_str.strip().split(":")
        hours = int(hours_str)
        minutes = int(minutes_str)
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid clock time format: {time_str!r}") from e

    if not (0 <= hours <= 23):
        raise ValueError(f"Hours out of range: {hours}")
    if not (0 <= minutes <= 59):
        raise ValueError(f"Minutes out of range: {minutes}")

    return hours * 60 + minutes


def format_clock_time(value: Optional[datetime]) -> str:
    """Format datetime as "HH:MM", or "N/A" when missing."""
    if value is None:
        return "N/A"
    return value.strftime(TIME_FORMAT)


def interval_minutes(frequency_hours: float) -> int:
    """Convert a dose frequency in hours to whole minutes, between 1 and a day."""
    return max(1, int(min(frequency_hours * 60, MINUTES_PER_DAY)))


def generate_dose_times(start: datetime, frequency_hours: float) -> list[str]:
    """Generate the dose times of one day starting at ``start``.

    The interval is floored to whole minutes with a minimum of one minute.
    Times are emitted until 24 hours are covered, so an interval of 24
    hours or more yields a single entry.

    Args:
        start: First dose time
        frequency_hours: Hours between doses

    Returns:
        Ordered list of "HH:MM" strings, first one being ``start``

    Examples:
        >>> generate_dose_times(datetime(2024, 1, 1, 8, 0), 8)
        ['08:00', '16:00', '00:00']
    """
    step = interval_minutes(frequency_hours)
    times = []
    next_dose = start
    total_minutes = 0

    while total_minutes < MINUTES_PER_DAY:
        times.append(next_dose.strftime(TIME_FORMAT))
        next_dose += timedelta(minutes=step)
        total_minutes += step

    logger.debug(
        f"Generated {len(times)} dose time(s) from {start.strftime(TIME_FORMAT)} "
        f"every {step} minute(s)"
    )
    return times


def next_dose_after(times: list[str], current_time: datetime) -> Optional[str]:
    """Pick the first dose time strictly after ``current_time``.

    Wraps around to the earliest time of the day when every dose time
    has already passed.

    Args:
        times: Dose times in "HH:MM" format
        current_time: Reference time

    Returns:
        Next dose time, or None if ``times`` is empty
    """
    if not times:
        return None

    current_minutes = current_time.hour * 60 + current_time.minute
    ordered = sorted(times, key=parse_clock_time)

    for time_str in ordered:
        if parse_clock_time(time_str) > current_minutes:
            return time_str
    return ordered[0]


def reminder_interval_seconds(frequency_hours: float, minimum_seconds: int = 60) -> int:
    """Medication reminder interval in seconds, floored to ``minimum_seconds``."""
    return max(minimum_seconds, int(frequency_hours * 3600))


def hydration_interval_minutes(
    goal: int,
    custom_frequency: Optional[float] = None,
    active_hours: float = 16,
) -> int:
    """Minutes between hydration reminders.

    Uses the custom frequency (hours) when set, otherwise spreads the
    daily goal over the waking hours.

    Args:
        goal: Daily goal in glasses
        custom_frequency: Optional fixed frequency in hours
        active_hours: Hours per day in which reminders are spread

    Returns:
        Interval in minutes, at least 1
    """
    if custom_frequency is not None:
        return max(1, int(custom_frequency * 60))
    return max(1, int(active_hours * 60 / max(goal, 1)))


def is_same_day(first: Optional[datetime], second: datetime) -> bool:
    """Check if two datetimes fall on the same calendar day."""
    if first is None:
        return False
    return first.date() == second.date()


def format_time_since(last_taken: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human readable time elapsed since the last dose.

    Examples:
        >>> format_time_since(None)
        'Not taken today'
        >>> format_time_since(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 10, 30))
        '1h 30min ago'
    """
    if last_taken is None:
        return "Not taken today"

    if now is None:
        now = datetime.now()

    total_minutes = int((now - last_taken).total_seconds() // 60)

    if total_minutes < 5:
        return "Just taken"
    if total_minutes < 60:
        return f"{total_minutes} min ago"
    if total_minutes < MINUTES_PER_DAY:
        return f"{total_minutes // 60}h {total_minutes % 60}min ago"
    return f"{total_minutes // MINUTES_PER_DAY} days ago"
