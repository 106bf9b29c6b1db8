"""
Off-time entry.

Bulk-marks machine hours as unavailable (maintenance, holidays) over a date
range. Hours already taken by a scheduled order cannot be marked.
"""

from datetime import date, datetime, time, timedelta, timezone

from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.scheduling.entities import AvailabilityRecord, Machine
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway
from flexi_scheduler.domain.scheduling.services import AvailabilityIndex, ScheduleStore
from flexi_scheduler.domain.scheduling.value_objects.time_window import TimeWindow
from flexi_scheduler.domain.shared.exceptions import (
    MachineNotFoundError,
    ValidationFailure,
)

logger = get_logger(__name__)


class OffTimeService:
    """Application service for machine off-time."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def set_off_time(
        self,
        machine_id: str,
        start_date: date,
        end_date: date,
        start_hour: int,
        end_hour: int,
    ) -> list[AvailabilityRecord]:
        """
        Mark ``[start_hour, end_hour)`` unavailable on every date of
        ``[start_date, end_date]``.

        Args:
            machine_id: Machine to take offline
            start_date: First date (inclusive)
            end_date: Last date (inclusive)
            start_hour: First unavailable hour (0-23)
            end_hour: Hour the machine is back (1-24, exclusive)

        Returns:
            The persisted record of every date in the range

        Raises:
            MachineNotFoundError: If the machine does not exist
            ValidationFailure: If the range is invalid or overlaps scheduled orders
            PersistenceFailure: If a write fails
        """
        if end_date < start_date:
            raise ValidationFailure(
                "Invalid off-time range", ["End date must not be before start date"]
            )
        if not 0 <= start_hour < end_hour <= 24:
            raise ValidationFailure(
                "Invalid off-time range",
                [f"Hours must satisfy 0 <= start < end <= 24, got {start_hour}-{end_hour}"],
            )

        machines = await self._gateway.list_machines()
        machine = next(
            (m for m in machines if machine_id in (m.id, m.display_key)), None
        )
        if machine is None:
            raise MachineNotFoundError(machine_id)

        conflicts = await self._scheduled_conflicts(
            machines, machine.id, start_date, end_date, start_hour, end_hour
        )
        if conflicts:
            raise ValidationFailure(
                f"Cannot set off-time on {machine.machine_name}: hours already scheduled",
                conflicts,
                {"machine_id": machine.id},
            )

        # Start from what is persisted so existing off-time is kept
        index = AvailabilityIndex(
            await self._gateway.list_availability(machine.id, start_date, end_date)
        )
        records = index.set_unavailable(
            machine.id, start_date, end_date, range(start_hour, end_hour)
        )
        for record in records:
            await self._gateway.set_availability(
                record.machine_id, record.date, record.sorted_hours()
            )

        logger.info(
            "off_time_set",
            machine_id=machine.id,
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            hours=f"{start_hour}-{end_hour}",
        )
        return records

    async def toggle_hour(
        self, machine_id: str, day: date, hour: int
    ) -> AvailabilityRecord:
        """Flip a single hour of a machine between available and unavailable."""
        hours = await self._gateway.get_availability(machine_id, day)
        index = AvailabilityIndex(
            [AvailabilityRecord(machine_id=machine_id, date=day, unavailable_hours=hours)]
        )
        record = index.toggle_hour(machine_id, day, hour)
        await self._gateway.set_availability(machine_id, day, record.sorted_hours())
        return record

    async def _scheduled_conflicts(
        self,
        machines: list[Machine],
        machine_id: str,
        start_date: date,
        end_date: date,
        start_hour: int,
        end_hour: int,
    ) -> list[str]:
        store = ScheduleStore()
        store.rebuild(machines, await self._gateway.list_orders())
        events = store.events_for_machine(machine_id)
        conflicts = []
        day = start_date
        while day <= end_date:
            midnight = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
            off = TimeWindow(
                midnight + timedelta(hours=start_hour),
                midnight + timedelta(hours=end_hour),
            )
            for event in events:
                if event.time_window.overlaps_with(off):
                    conflicts.append(
                        f"Order {event.title or event.order_id} is scheduled during "
                        f"{day.isoformat()} {start_hour:02d}:00-{end_hour:02d}:00"
                    )
            day += timedelta(days=1)
        return conflicts
