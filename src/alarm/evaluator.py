"""
Due-reminder evaluation.
Pure functions deciding which reminders should fire at a given instant.
"""

from datetime import datetime
from typing import Iterable, List, Tuple

from config.logging_config import get_logger
from src.reminder.models import Reminder, RepeatPolicy

logger = get_logger(__name__)

DAYS_PER_WEEK = 7


def parse_clock_time(value: str) -> Tuple[int, int]:
    """
    Parse an "HH:MM" time of day.

    Args:
        value: Time string, 24-hour

    Returns:
        (hour, minute) tuple

    Raises:
        ValueError: If the string is not a valid time of day
    """
    hour_str, minute_str = value.strip().split(":")
    hour, minute = int(hour_str), int(minute_str)

    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Time of day out of range: {value!r}")

    return hour, minute


def format_clock_time(instant: datetime) -> str:
    """Format an instant as "HH:MM" (24-hour, seconds dropped)."""
    return instant.strftime("%H:%M")


def day_index(instant: datetime) -> int:
    """Day of week with Sunday=0 .. Saturday=6."""
    # datetime.weekday() is Monday=0
    return (instant.weekday() + 1) % DAYS_PER_WEEK


def _same_minute(a: datetime, b: datetime) -> bool:
    return a.replace(second=0, microsecond=0) == b.replace(second=0, microsecond=0)


def is_due(reminder: Reminder, now: datetime) -> bool:
    """
    Decide whether a reminder should fire at `now`.

    Raises ValueError for records that cannot be interpreted; evaluate()
    turns those into "not due".
    """
    if not reminder.enabled:
        return False

    if (now.hour, now.minute) != parse_clock_time(reminder.time):
        return False

    triggered_at = reminder.triggered_at

    if reminder.repeat is RepeatPolicy.NONE:
        # One-shot: fires once, and never again on the day it fired
        if triggered_at is not None:
            return False
        return True

    # Repeating reminders fire once per matching minute
    if triggered_at is not None and _same_minute(triggered_at, now):
        return False

    if reminder.repeat is RepeatPolicy.DAILY:
        return True

    if reminder.repeat is RepeatPolicy.CUSTOM:
        days = reminder.days
        if days is None or len(days) != DAYS_PER_WEEK:
            raise ValueError(f"custom repeat needs {DAYS_PER_WEEK} day flags, got {days!r}")
        return bool(days[day_index(now)])

    raise ValueError(f"Unknown repeat policy: {reminder.repeat!r}")


def evaluate(now: datetime, reminders: Iterable[Reminder]) -> List[Reminder]:
    """
    Select the reminders due at `now`.

    Input order is preserved. Malformed reminders are logged and treated
    as not due so one bad record never stops the others from firing.

    Args:
        now: Current local wall-clock instant
        reminders: Reminder snapshot

    Returns:
        Due reminders, in input order
    """
    due = []
    for reminder in reminders:
        try:
            if is_due(reminder, now):
                due.append(reminder)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Reminder {reminder.id} is malformed, skipping: {e}")

    if due:
        logger.debug(f"{len(due)} reminder(s) due at {format_clock_time(now)}")

    return due
