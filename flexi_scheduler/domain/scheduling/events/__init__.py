"""
Domain Events Module

Exports the notifications emitted by the scheduling core.
"""

from .domain_events import (
    DomainEvent,
    EventPublisher,
    IntegrityChecked,
    OrderRescheduled,
    OrderScheduled,
    OrderUnscheduled,
)

__all__ = [
    "DomainEvent",
    "EventPublisher",
    "IntegrityChecked",
    "OrderRescheduled",
    "OrderScheduled",
    "OrderUnscheduled",
]
