"""
Time Window Value Object

Represents a half-open period ``[start_time, end_time)`` between two UTC
instants. Used for scheduled order ranges, day bounds and availability hours.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC instant (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimeWindow:
    """
    A time window value object representing the half-open range
    ``[start_time, end_time)``.

    Two windows that merely touch (one ends exactly when the other starts)
    do not overlap.
    """

    __slots__ = ("_start_time", "_end_time")

    def __init__(self, start_time: datetime, end_time: datetime) -> None:
        """
        Initialize a TimeWindow.

        Args:
            start_time: Inclusive start instant
            end_time: Exclusive end instant

        Raises:
            ValueError: If end_time is before start_time
        """
        start_time = as_utc(start_time)
        end_time = as_utc(end_time)
        if start_time > end_time:
            raise ValueError("Start time must be before end time")
        self._start_time = start_time
        self._end_time = end_time

    @classmethod
    def from_duration(cls, start_time: datetime, hours: float) -> "TimeWindow":
        """
        Create a TimeWindow starting at ``start_time`` and lasting ``hours``.

        Args:
            start_time: Start instant
            hours: Duration in (possibly fractional) hours

        Returns:
            TimeWindow covering the duration
        """
        if hours < 0:
            raise ValueError("Duration cannot be negative")
        return cls(start_time, as_utc(start_time) + timedelta(hours=hours))

    @property
    def start_time(self) -> datetime:
        """Get inclusive start instant."""
        return self._start_time

    @property
    def end_time(self) -> datetime:
        """Get exclusive end instant."""
        return self._end_time

    @property
    def is_empty(self) -> bool:
        return self._end_time <= self._start_time

    def duration_minutes(self) -> float:
        """
        Get duration of the time window in minutes.

        Returns:
            Duration in minutes
        """
        return (self._end_time - self._start_time).total_seconds() / 60

    def overlaps_with(self, other: "TimeWindow") -> bool:
        """
        Check if this window overlaps with another window.

        Uses half-open comparison: ``a.start < b.end and b.start < a.end``.

        Args:
            other: Other time window to check

        Returns:
            True if windows overlap
        """
        return (
            self._start_time < other._end_time and other._start_time < self._end_time
        )

    def intersection_with(self, other: "TimeWindow") -> Optional["TimeWindow"]:
        """
        Get intersection with another time window.

        Args:
            other: Other time window

        Returns:
            Intersection time window or None if no overlap
        """
        if not self.overlaps_with(other):
            return None

        start = max(self._start_time, other._start_time)
        end = min(self._end_time, other._end_time)
        return TimeWindow(start, end)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeWindow):
            return False
        return (
            self._start_time == other._start_time and self._end_time == other._end_time
        )

    def __hash__(self) -> int:
        return hash((self._start_time, self._end_time))

    def __str__(self) -> str:
        return f"{self._start_time.isoformat()} to {self._end_time.isoformat()}"

    def __repr__(self) -> str:
        return f"TimeWindow(start_time={self._start_time!r}, end_time={self._end_time!r})"
