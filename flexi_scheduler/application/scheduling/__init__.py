from .command_dispatcher import SchedulingCommandDispatcher
from .dtos import (
    CalendarEventView,
    CommandResult,
    DropOnPoolRequest,
    DropOnSlotRequest,
    OrderSchedulingResponse,
    ViewDayRequest,
    ViewState,
)

__all__ = [
    "CalendarEventView",
    "CommandResult",
    "DropOnPoolRequest",
    "DropOnSlotRequest",
    "OrderSchedulingResponse",
    "SchedulingCommandDispatcher",
    "ViewDayRequest",
    "ViewState",
]
