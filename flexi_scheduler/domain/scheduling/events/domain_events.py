"""
Domain Events

Notifications emitted for the rendering layer: one per successful scheduling
mutation, and one per integrity check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Protocol
from uuid import UUID, uuid4


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=_now, kw_only=True)


@dataclass(frozen=True)
class OrderScheduled(DomainEvent):
    """Raised when an order is placed on a machine."""

    type: ClassVar[str] = "scheduled"

    order_id: str
    machine_id: str
    start_time: datetime
    end_time: datetime

    def to_notification(self) -> dict:
        return {"type": self.type, "orderId": self.order_id}


@dataclass(frozen=True)
class OrderUnscheduled(DomainEvent):
    """Raised when an order is taken off the calendar."""

    type: ClassVar[str] = "unscheduled"

    order_id: str
    previous_machine_id: str | None = None
    reason: str | None = None

    def to_notification(self) -> dict:
        return {"type": self.type, "orderId": self.order_id}


@dataclass(frozen=True)
class OrderRescheduled(DomainEvent):
    """Raised when a scheduled order moves to a new machine or start time."""

    type: ClassVar[str] = "rescheduled"

    order_id: str
    old_machine_id: str
    new_machine_id: str
    start_time: datetime
    end_time: datetime

    def to_notification(self) -> dict:
        return {"type": self.type, "orderId": self.order_id}


@dataclass(frozen=True)
class IntegrityChecked(DomainEvent):
    """Raised after every integrity check, for banner display."""

    orphan_event_count: int
    orphan_machine_count: int
    cleaned: bool = False

    def to_notification(self) -> dict:
        return {
            "orphanEventCount": self.orphan_event_count,
            "orphanMachineCount": self.orphan_machine_count,
        }


class EventPublisher(Protocol):
    """Anything that can deliver domain events to subscribers."""

    async def publish_async(self, event: DomainEvent) -> None: ...
