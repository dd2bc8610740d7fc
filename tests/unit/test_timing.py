"""Unit tests for clock-time utilities."""

import math
from datetime import datetime

import pytest
from freezegun import freeze_time

from farmedic.utils.timing import (
    format_clock_time,
    format_time_since,
    generate_dose_times,
    hydration_interval_minutes,
    is_same_day,
    next_dose_after,
    parse_clock_time,
    reminder_interval_seconds,
)


def test_parse_clock_time():
    assert parse_clock_time("00:00") == 0
    assert parse_clock_time("08:30") == 510
    assert parse_clock_time(" 23:59 ") == 1439


@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "12", "", "1:2:3"])
def test_parse_clock_time_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_clock_time(value)


def test_generate_dose_times_every_eight_hours():
    times = generate_dose_times(datetime(2024, 1, 1, 8, 0), 8)
    assert times == ["08:00", "16:00", "00:00"]


@pytest.mark.parametrize("hours", [1, 2, 3, 5, 7, 8, 11, 12, 24])
def test_generate_dose_times_covers_one_day(hours):
    start = datetime(2024, 3, 10, 21, 17)

    times = generate_dose_times(start, hours)

    assert len(times) == math.ceil(24 / hours)
    assert times[0] == "21:17"
    minutes = [parse_clock_time(t) for t in times]
    for previous, current in zip(minutes, minutes[1:]):
        assert (current - previous) % (24 * 60) == hours * 60


def test_generate_dose_times_fractional_interval_is_floored_to_minutes():
    # 1.33h == 79.8 minutes -> 79 minutes
    times = generate_dose_times(datetime(2024, 1, 1, 0, 0), 1.33)
    assert times[:3] == ["00:00", "01:19", "02:38"]
    assert len(times) == math.ceil(24 * 60 / 79)


def test_generate_dose_times_minimum_one_minute():
    times = generate_dose_times(datetime(2024, 1, 1, 0, 0), 0.001)
    assert len(times) == 24 * 60
    assert times[1] == "00:01"


@pytest.mark.parametrize("hours", [24, 36, 48, 1e8, float("inf")])
def test_generate_dose_times_single_entry_for_daily_or_longer(hours):
    assert generate_dose_times(datetime(2024, 1, 1, 9, 0), hours) == ["09:00"]


def test_next_dose_after_picks_following_time():
    times = ["08:00", "16:00", "00:00"]
    assert next_dose_after(times, datetime(2024, 1, 1, 10, 0)) == "16:00"
    assert next_dose_after(times, datetime(2024, 1, 1, 7, 59)) == "08:00"


def test_next_dose_after_wraps_to_earliest_time():
    times = ["08:00", "16:00", "00:00"]
    assert next_dose_after(times, datetime(2024, 1, 1, 16, 0)) == "00:00"
    assert next_dose_after(["09:00"], datetime(2024, 1, 1, 9, 0)) == "09:00"


def test_next_dose_after_empty():
    assert next_dose_after([], datetime(2024, 1, 1, 9, 0)) is None


def test_reminder_interval_seconds():
    assert reminder_interval_seconds(2) == 7200
    assert reminder_interval_seconds(0.25) == 900
    assert reminder_interval_seconds(0.001) == 60
    assert reminder_interval_seconds(0.001, minimum_seconds=1) == 3


def test_hydration_interval_minutes():
    # Goal-derived: 16 waking hours spread over the goal
    assert hydration_interval_minutes(8) == 120
    assert hydration_interval_minutes(12) == 80
    # Fixed frequency wins over the goal
    assert hydration_interval_minutes(8, custom_frequency=1.5) == 90
    assert hydration_interval_minutes(8, custom_frequency=0.001) == 1
    assert hydration_interval_minutes(0) == 960
    assert hydration_interval_minutes(4, active_hours=12) == 180


def test_format_clock_time():
    assert format_clock_time(datetime(2024, 1, 1, 7, 5)) == "07:05"
    assert format_clock_time(None) == "N/A"


def test_is_same_day():
    assert is_same_day(datetime(2024, 1, 1, 0, 1), datetime(2024, 1, 1, 23, 59))
    assert not is_same_day(datetime(2023, 12, 31, 23, 59), datetime(2024, 1, 1, 0, 1))
    assert not is_same_day(None, datetime(2024, 1, 1))


@pytest.mark.parametrize(
    "last_taken,expected",
    [
        (None, "Not taken today"),
        (datetime(2024, 1, 1, 11, 58), "Just taken"),
        (datetime(2024, 1, 1, 11, 30), "30 min ago"),
        (datetime(2024, 1, 1, 10, 30), "1h 30min ago"),
        (datetime(2023, 12, 29, 11, 0), "3 days ago"),
    ],
)
def test_format_time_since(last_taken, expected):
    now = datetime(2024, 1, 1, 12, 0)
    assert format_time_since(last_taken, now) == expected


@freeze_time("2024-01-01 12:00:00")
def test_format_time_since_defaults_to_current_time():
    assert format_time_since(datetime(2024, 1, 1, 11, 50)) == "10 min ago"
