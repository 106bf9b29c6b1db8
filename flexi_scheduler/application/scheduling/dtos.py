"""
Scheduling Data Transfer Objects.

Request and response shapes for the scheduling command surface and the
calendar view.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from flexi_scheduler.domain.scheduling.entities import ProductionOrder, ScheduledEvent
from flexi_scheduler.domain.scheduling.value_objects.time_grid import VisiblePosition


class DropOnSlotRequest(BaseModel):
    """An order dropped on a machine's grid cell."""

    model_config = ConfigDict(frozen=True)

    order_id: str = Field(..., min_length=1)
    machine_id: str = Field(..., min_length=1, description="Machine ID or name")
    day: date | None = Field(None, description="Defaults to the day in view")
    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(0, ge=0, le=59)


class DropOnPoolRequest(BaseModel):
    """An order dropped back on the backlog pool."""

    model_config = ConfigDict(frozen=True)

    order_id: str = Field(..., min_length=1)


class ViewDayRequest(BaseModel):
    """The calendar of one client navigated to another day."""

    model_config = ConfigDict(frozen=True)

    day: date


class ViewState(BaseModel):
    view_id: str
    day: date


class OrderSchedulingResponse(BaseModel):
    """Scheduling fields of an order, with instants as ISO-8601 strings."""

    id: str
    odp_number: str
    scheduled_machine_id: str | None
    scheduled_start_time: str | None
    scheduled_end_time: str | None
    status: str
    color: str | None

    @classmethod
    def from_order(cls, order: ProductionOrder) -> "OrderSchedulingResponse":
        return cls(
            id=order.id,
            odp_number=order.odp_number,
            scheduled_machine_id=order.scheduled_machine_id,
            scheduled_start_time=_iso(order.scheduled_start_time),
            scheduled_end_time=_iso(order.scheduled_end_time),
            status=order.status.value,
            color=order.color,
        )


class CommandResult(BaseModel):
    """Outcome of one dispatched command, ready for the view."""

    success: bool
    command: str
    order: OrderSchedulingResponse | None = None
    error: dict | None = None

    @property
    def reasons(self) -> list[str]:
        if not self.error:
            return []
        return list(self.error.get("reasons", []))


class CalendarEventView(BaseModel):
    """One event positioned on a day's row."""

    id: str
    order_id: str
    machine_id: str
    title: str | None
    color: str | None
    start_time: datetime
    end_time: datetime
    left_percent: float
    width_percent: float
    truncated_at_midnight: bool

    @classmethod
    def build(
        cls, event: ScheduledEvent, position: VisiblePosition
    ) -> "CalendarEventView":
        return cls(
            id=event.id,
            order_id=event.order_id,
            machine_id=event.machine_id,
            title=event.title,
            color=event.color,
            start_time=event.start_time,
            end_time=event.end_time,
            left_percent=round(position.left_percent, 4),
            width_percent=round(position.width_percent, 4),
            truncated_at_midnight=position.truncated_at_midnight,
        )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
