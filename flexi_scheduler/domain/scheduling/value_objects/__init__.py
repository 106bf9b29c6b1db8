"""Value objects for the scheduling domain."""

from .enums import (
    Department,
    MachineStatus,
    MachineType,
    OrderStatus,
    Shift,
    WorkCenter,
)
from .time_window import TimeWindow

__all__ = [
    "Department",
    "MachineStatus",
    "MachineType",
    "OrderStatus",
    "Shift",
    "TimeWindow",
    "WorkCenter",
]
