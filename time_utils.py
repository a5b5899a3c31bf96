# time_utils.py
#
# Description:
# Pure helpers for working with "HH:mm" clock strings: parsing, converting to
# minutes since midnight, bucketing into parts of the day, formatting for
# display and ordering tasks by their scheduled time. Nothing in here keeps
# state, so every function can be called from the UI and the engines alike.
#

import datetime
import re
from typing import Iterable, List, Optional, Tuple

CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

# Half-open hour ranges. Night wraps across midnight.
TIME_PERIODS = {
    "morning": (5, 12),
    "afternoon": (12, 17),
    "evening": (17, 21),
    "night": (21, 5),
}

PERIOD_LABELS = {
    "morning": "🌅 Morning",
    "afternoon": "☀️ Afternoon",
    "evening": "🌆 Evening",
    "night": "🌙 Night",
}


def parse_clock(time: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Splits an "HH:mm" string into (hour, minute).

    Returns None for anything that is not a valid 24-hour clock time, so
    callers can treat malformed input as "no time" instead of crashing.
    """
    if not isinstance(time, str):
        return None
    match = CLOCK_PATTERN.match(time.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def minutes_since_midnight(hour: int, minute: int) -> int:
    """Returns the minute of the day in [0, 1439]."""
    return hour * 60 + minute


def clock_minutes(time: Optional[str]) -> Optional[int]:
    """Minutes since midnight for an "HH:mm" string, or None if malformed."""
    parsed = parse_clock(time)
    if parsed is None:
        return None
    return minutes_since_midnight(*parsed)


def now_minutes(now: datetime.datetime) -> int:
    return minutes_since_midnight(now.hour, now.minute)


def time_period(time: Optional[str]) -> str:
    """
    Buckets a clock time into morning, afternoon, evening or night.

    Malformed times fall into "night", the bucket that covers everything
    outside the daytime ranges.
    """
    parsed = parse_clock(time)
    if parsed is None:
        return "night"
    hour = parsed[0]
    for period, (start, end) in TIME_PERIODS.items():
        if start < end and start <= hour < end:
            return period
    return "night"


def format_display(time: Optional[str]) -> str:
    """Formats "HH:mm" as a 12-hour string, e.g. "13:05" -> "1:05 PM"."""
    parsed = parse_clock(time)
    if parsed is None:
        return time or ""
    hour, minute = parsed
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"


def today(now: Optional[datetime.datetime] = None) -> str:
    """Returns the local calendar date as YYYY-MM-DD."""
    now = now or datetime.datetime.now()
    return now.strftime("%Y-%m-%d")


def sort_by_scheduled_time(tasks: Iterable) -> List:
    """
    Sorts tasks by time of day.

    Tasks without a (valid) scheduled time go after all timed tasks and keep
    their relative order, since sorted() is stable.
    """
    def sort_key(task):
        minutes = clock_minutes(task.scheduled_time)
        if minutes is None:
            return (1, 0)
        return (0, minutes)

    return sorted(tasks, key=sort_key)
