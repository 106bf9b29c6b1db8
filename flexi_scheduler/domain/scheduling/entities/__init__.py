"""Scheduling domain entities."""

from .availability import AvailabilityRecord
from .machine import Machine
from .phase import Phase
from .production_order import (
    SCHEDULING_FIELDS,
    ProductionOrder,
    generate_odp_number,
)
from .scheduled_event import ScheduledEvent

__all__ = [
    "AvailabilityRecord",
    "Machine",
    "Phase",
    "ProductionOrder",
    "SCHEDULING_FIELDS",
    "ScheduledEvent",
    "generate_odp_number",
]
