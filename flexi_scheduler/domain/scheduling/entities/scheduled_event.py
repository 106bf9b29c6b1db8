"""Scheduled event projected from an order's scheduling fields."""

from datetime import datetime

from pydantic import Field

from ...shared.base import ValueObject
from ..value_objects.time_window import TimeWindow
from .production_order import ProductionOrder


class ScheduledEvent(ValueObject):
    """
    One placement on the calendar.

    Events are never stored on their own: they are derived from orders whose
    status is SCHEDULED. ``machine_key`` carries the reference a legacy event
    used (machine name) when the event was not projected from an order.
    """

    id: str
    order_id: str
    machine_id: str
    start_time: datetime
    end_time: datetime
    color: str | None = None
    title: str | None = None
    machine_key: str | None = Field(default=None)

    @property
    def time_window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)

    @property
    def machine_reference(self) -> str:
        """Machine reference used for catalog lookups."""
        return self.machine_key or self.machine_id

    def conflicts_with(self, other: "ScheduledEvent") -> bool:
        """Two events conflict when they share a machine and their ranges overlap."""
        return (
            self.machine_id == other.machine_id
            and self.time_window.overlaps_with(other.time_window)
        )

    @classmethod
    def from_order(cls, order: ProductionOrder) -> "ScheduledEvent":
        """
        Project a scheduled order into its event.

        Raises:
            ValueError: If the order is not scheduled
        """
        if not order.is_scheduled:
            raise ValueError(f"Order {order.id} is not scheduled")
        return cls(
            id=f"event-{order.id}",
            order_id=order.id,
            machine_id=order.scheduled_machine_id,  # type: ignore[arg-type]
            start_time=order.scheduled_start_time,  # type: ignore[arg-type]
            end_time=order.scheduled_end_time,  # type: ignore[arg-type]
            color=order.color,
            title=order.odp_number,
        )
