"""
Scheduling command dispatcher.

The single entry point the view uses for drag-and-drop: pointer gestures are
translated into drop commands, dispatched to the scheduler engine, and the
outcome is returned as a ``CommandResult`` the view can render directly.
"""

from datetime import date

from flexi_scheduler.core.observability import get_logger, set_correlation_id
from flexi_scheduler.domain.scheduling.services import DEFAULT_VIEW, SchedulerEngine
from flexi_scheduler.domain.scheduling.value_objects.time_grid import (
    slot_index,
    visible_position,
)
from flexi_scheduler.domain.shared.base import utcnow
from flexi_scheduler.domain.shared.exceptions import DomainError

from .dtos import (
    CalendarEventView,
    CommandResult,
    DropOnPoolRequest,
    DropOnSlotRequest,
    OrderSchedulingResponse,
)

logger = get_logger(__name__)


class SchedulingCommandDispatcher:
    """
    Dispatches drop commands to the scheduler engine for one view.

    The dispatcher owns the day currently in view; changing it invalidates
    the mutations this view still has in flight so a late response is not
    applied. Other views sharing the engine keep their own token.
    """

    def __init__(
        self,
        engine: SchedulerEngine,
        view_day: date | None = None,
        view_id: str = DEFAULT_VIEW,
    ) -> None:
        self._engine = engine
        self._view_day = view_day or utcnow().date()
        self._view_id = view_id

    @property
    def view_id(self) -> str:
        return self._view_id

    @property
    def view_day(self) -> date:
        return self._view_day

    def set_view_day(self, day: date) -> None:
        if day != self._view_day:
            self._view_day = day
            self._engine.invalidate_pending(self._view_id)

    async def dispatch(
        self, command: DropOnSlotRequest | DropOnPoolRequest
    ) -> CommandResult:
        """Run one command; domain errors are folded into the result."""
        correlation_id = set_correlation_id()
        name = "drop_on_slot" if isinstance(command, DropOnSlotRequest) else "drop_on_pool"
        log = logger.bind(
            command=name, order_id=command.order_id, view_id=self._view_id
        )
        try:
            if isinstance(command, DropOnSlotRequest):
                day = command.day or self._view_day
                order = await self._engine.drop_on_slot(
                    command.order_id,
                    command.machine_id,
                    day,
                    slot_index(command.hour, command.minute),
                    view=self._view_id,
                )
            else:
                order = await self._engine.drop_on_pool(
                    command.order_id, view=self._view_id
                )
        except DomainError as e:
            log.info(
                "command_rejected",
                error_type=e.error_type.value,
                message=e.message,
                correlation_id=correlation_id,
            )
            return CommandResult(success=False, command=name, error=e.to_dict())

        log.info("command_applied", status=order.status.value)
        return CommandResult(
            success=True,
            command=name,
            order=OrderSchedulingResponse.from_order(order),
        )

    async def on_drop_on_slot(
        self,
        order_id: str,
        machine_id: str,
        hour: int,
        minute: int = 0,
        day: date | None = None,
    ) -> CommandResult:
        return await self.dispatch(
            DropOnSlotRequest(
                order_id=order_id,
                machine_id=machine_id,
                day=day,
                hour=hour,
                minute=minute,
            )
        )

    async def on_drop_on_pool(self, order_id: str) -> CommandResult:
        return await self.dispatch(DropOnPoolRequest(order_id=order_id))

    async def calendar(self, day: date | None = None) -> list[CalendarEventView]:
        """
        Events visible on ``day`` (the day in view by default), with positions.

        Read-only: looking at another day does not change the day in view.
        """
        day = day or self._view_day
        await self._engine.refresh()
        views = []
        for event in self._engine.store.events_for_day(day):
            position = visible_position(day, event.start_time, event.end_time)
            if position is not None:
                views.append(CalendarEventView.build(event, position))
        return views
