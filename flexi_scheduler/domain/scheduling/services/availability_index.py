"""
Availability Index

Per-machine, per-date sets of unavailable hours, consulted before a
placement is accepted.
"""

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from ...shared.base import DomainService
from ..entities.availability import AvailabilityRecord

logger = logging.getLogger(__name__)


def _check_hours(hours: Iterable[int]) -> set[int]:
    checked = set()
    for hour in hours:
        if not 0 <= hour <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {hour}")
        checked.add(hour)
    return checked


class AvailabilityIndex(DomainService):
    """
    In-memory index of unavailable hours keyed by ``(machine_id, date)``.

    An absent key means the machine is available for every hour of that date.
    """

    def __init__(self, records: Iterable[AvailabilityRecord] = ()) -> None:
        self._hours: dict[tuple[str, date], set[int]] = {}
        for record in records:
            self.load(record)

    def load(self, record: AvailabilityRecord) -> None:
        """Replace the hours held for the record's machine and date."""
        key = (record.machine_id, record.date)
        if record.unavailable_hours:
            self._hours[key] = set(record.unavailable_hours)
        else:
            self._hours.pop(key, None)

    def clear(self) -> None:
        self._hours.clear()

    def is_available(
        self, machine_id: str, day: date, hours: Iterable[int]
    ) -> bool:
        """True iff none of ``hours`` is marked unavailable for the machine on ``day``."""
        blocked = self._hours.get((machine_id, day))
        if not blocked:
            return True
        return blocked.isdisjoint(hours)

    def unavailable_hours(self, machine_id: str, day: date) -> list[int]:
        return sorted(self._hours.get((machine_id, day), ()))

    def set_unavailable(
        self,
        machine_id: str,
        start_date: date,
        end_date: date,
        hours: Iterable[int],
    ) -> list[AvailabilityRecord]:
        """
        Mark ``hours`` unavailable on every date of ``[start_date, end_date]``.

        Re-marking an hour that is already unavailable is a no-op.

        Args:
            machine_id: Machine to mark
            start_date: First date (inclusive)
            end_date: Last date (inclusive)
            hours: Hours of day (0-23)

        Returns:
            The resulting record for every date in the range

        Raises:
            ValueError: If the range is reversed or an hour is out of range
        """
        if end_date < start_date:
            raise ValueError("End date must not be before start date")
        marked = _check_hours(hours)

        records = []
        day = start_date
        while day <= end_date:
            current = self._hours.setdefault((machine_id, day), set())
            current |= marked
            records.append(
                AvailabilityRecord(
                    machine_id=machine_id, date=day, unavailable_hours=current
                )
            )
            day += timedelta(days=1)

        logger.debug(
            "Marked hours %s unavailable for machine %s from %s to %s",
            sorted(marked),
            machine_id,
            start_date,
            end_date,
        )
        return records

    def toggle_hour(self, machine_id: str, day: date, hour: int) -> AvailabilityRecord:
        """Flip one hour between available and unavailable."""
        _check_hours([hour])
        current = self._hours.setdefault((machine_id, day), set())
        if hour in current:
            current.remove(hour)
        else:
            current.add(hour)
        record = AvailabilityRecord(
            machine_id=machine_id, date=day, unavailable_hours=current
        )
        if not current:
            del self._hours[(machine_id, day)]
        return record

    def records(self) -> list[AvailabilityRecord]:
        """Get every non-empty record, ordered by machine and date."""
        return [
            AvailabilityRecord(machine_id=machine_id, date=day, unavailable_hours=hours)
            for (machine_id, day), hours in sorted(self._hours.items())
            if hours
        ]
