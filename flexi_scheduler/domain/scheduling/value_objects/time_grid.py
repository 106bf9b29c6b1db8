"""
Time Grid

Maps a calendar day onto a fixed grid of 15-minute slots (96 per day) and
computes where a time range lands on one day's row. Days are UTC days.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from .time_window import TimeWindow, as_utc

SLOT_MINUTES = 15
SLOTS_PER_HOUR = 60 // SLOT_MINUTES
HOURS_PER_DAY = 24
SLOTS_PER_DAY = HOURS_PER_DAY * SLOTS_PER_HOUR
MINUTES_PER_DAY = HOURS_PER_DAY * 60


@dataclass(frozen=True)
class VisiblePosition:
    """Horizontal placement of a time range on one day's row, in percent."""

    left_percent: float
    width_percent: float
    clipped_start: datetime
    clipped_end: datetime
    # The range continues past midnight; only the part on this day is drawn
    truncated_at_midnight: bool = False


def slot_index(hour: int, minute: int) -> int:
    """
    Get the slot holding ``hour:minute``.

    Args:
        hour: Hour of day (0-23)
        minute: Minute of hour (0-59)

    Returns:
        Slot index in ``[0, 96)``

    Raises:
        ValueError: If hour or minute is out of range
    """
    if not 0 <= hour < HOURS_PER_DAY:
        raise ValueError(f"Hour must be between 0 and 23, got {hour}")
    if not 0 <= minute < 60:
        raise ValueError(f"Minute must be between 0 and 59, got {minute}")
    return hour * SLOTS_PER_HOUR + minute // SLOT_MINUTES


def slot_to_time(slot: int) -> tuple[int, int]:
    """
    Inverse of ``slot_index``: the ``(hour, minute)`` at which a slot starts.

    Raises:
        ValueError: If slot is outside ``[0, 96)``
    """
    _check_slot(slot)
    return slot // SLOTS_PER_HOUR, (slot % SLOTS_PER_HOUR) * SLOT_MINUTES


def slot_start(day: date, slot: int) -> datetime:
    """Get the UTC instant at which ``slot`` starts on ``day``."""
    hour, minute = slot_to_time(slot)
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def day_bounds(day: date) -> TimeWindow:
    """Get ``[day 00:00, day+1 00:00)`` as a TimeWindow."""
    start = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
    return TimeWindow(start, start + timedelta(days=1))


def visible_position(
    day: date, range_start: datetime, range_end: datetime
) -> VisiblePosition | None:
    """
    Compute where ``[range_start, range_end)`` is drawn on ``day``'s row.

    The range is clipped to the day. A range that runs past midnight is
    truncated at the day boundary rather than wrapped, so the following day
    shows its own clipped portion when rendered for that day.

    Returns:
        VisiblePosition, or None when the range is empty or misses the day
    """
    range_start = as_utc(range_start)
    range_end = as_utc(range_end)
    if range_end <= range_start:
        return None

    bounds = day_bounds(day)
    clipped = bounds.intersection_with(TimeWindow(range_start, range_end))
    if clipped is None or clipped.is_empty:
        return None

    start_minutes = (clipped.start_time - bounds.start_time).total_seconds() / 60
    return VisiblePosition(
        left_percent=start_minutes / MINUTES_PER_DAY * 100,
        width_percent=clipped.duration_minutes() / MINUTES_PER_DAY * 100,
        clipped_start=clipped.start_time,
        clipped_end=clipped.end_time,
        truncated_at_midnight=range_end > bounds.end_time,
    )


def covered_hours(range_start: datetime, range_end: datetime) -> dict[date, list[int]]:
    """
    Get every hour bucket touched by ``[range_start, range_end)``, per UTC date.

    ``08:30-10:00`` covers hours 8 and 9; ``23:00-01:00`` covers hour 23 of the
    first date and hour 0 of the next.
    """
    range_start = as_utc(range_start)
    range_end = as_utc(range_end)
    hours: dict[date, list[int]] = {}
    cursor = range_start.replace(minute=0, second=0, microsecond=0)
    while cursor < range_end:
        hours.setdefault(cursor.date(), []).append(cursor.hour)
        cursor += timedelta(hours=1)
    return hours


def snap_to_slot(instant: datetime) -> datetime:
    """Round an instant up to the next slot boundary (unchanged if already on one)."""
    instant = as_utc(instant)
    floored = instant.replace(
        minute=(instant.minute // SLOT_MINUTES) * SLOT_MINUTES,
        second=0,
        microsecond=0,
    )
    if floored == instant:
        return instant
    return floored + timedelta(minutes=SLOT_MINUTES)


def _check_slot(slot: int) -> None:
    if not 0 <= slot < SLOTS_PER_DAY:
        raise ValueError(f"Slot must be between 0 and {SLOTS_PER_DAY - 1}, got {slot}")
