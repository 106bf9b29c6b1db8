"""Machine availability record."""

import datetime as dt

from pydantic import field_validator

from ...shared.base import ValueObject


class AvailabilityRecord(ValueObject):
    """Hours (0-23) during which a machine is unavailable on one date."""

    machine_id: str
    date: dt.date
    unavailable_hours: frozenset[int] = frozenset()

    @field_validator("unavailable_hours", mode="before")
    @classmethod
    def coerce_hours(cls, v):
        # Stored rows sometimes carry hours as strings
        hours = frozenset(int(h) for h in (v or ()))
        invalid = sorted(h for h in hours if not 0 <= h <= 23)
        if invalid:
            raise ValueError(f"Hours must be between 0 and 23, got {invalid}")
        return hours

    def sorted_hours(self) -> list[int]:
        return sorted(self.unavailable_hours)
