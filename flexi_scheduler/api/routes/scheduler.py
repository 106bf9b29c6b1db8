"""
Scheduler API Routes

Drag-and-drop command surface and the calendar view of one day.
"""

from datetime import date

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from flexi_scheduler.api.deps import DispatcherDep
from flexi_scheduler.api.errors import status_for
from flexi_scheduler.application.scheduling import (
    CalendarEventView,
    CommandResult,
    DropOnPoolRequest,
    DropOnSlotRequest,
    ViewDayRequest,
    ViewState,
)

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


def _respond(result: CommandResult) -> CommandResult | JSONResponse:
    if result.success:
        return result
    return JSONResponse(
        status_code=status_for(result.error["type"]),  # type: ignore[index]
        content=result.model_dump(mode="json"),
    )


@router.post("/drop-on-slot", response_model=CommandResult)
async def drop_on_slot(request: DropOnSlotRequest, dispatcher: DispatcherDep):
    """
    Drop an order on a machine's grid cell.

    Schedules an order from the pool or moves one already on the calendar.
    """
    return _respond(await dispatcher.dispatch(request))


@router.post("/drop-on-pool", response_model=CommandResult)
async def drop_on_pool(request: DropOnPoolRequest, dispatcher: DispatcherDep):
    """Drop an order back on the backlog pool."""
    return _respond(await dispatcher.dispatch(request))


@router.get("/events", response_model=list[CalendarEventView])
async def list_events(
    dispatcher: DispatcherDep,
    day: date | None = Query(None, description="Defaults to the day in view"),
):
    """Events visible on one day, positioned as percentages of the row."""
    return await dispatcher.calendar(day)


@router.put("/view", response_model=ViewState)
async def set_view_day(request: ViewDayRequest, dispatcher: DispatcherDep):
    """
    Navigate the caller's calendar to another day.

    Drops still in flight from this caller resolve as stale; other
    clients are unaffected.
    """
    dispatcher.set_view_day(request.day)
    return ViewState(view_id=dispatcher.view_id, day=dispatcher.view_day)
