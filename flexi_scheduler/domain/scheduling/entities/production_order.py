"""Production order (ODP) entity."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import Field, ValidationError, field_validator, model_validator

from ...shared.base import Entity
from ...shared.exceptions import InvalidCatalogEntryError
from ..value_objects.enums import Department, OrderStatus
from ..value_objects.time_window import TimeWindow, as_utc

# Persisted field names for an order's scheduling state
SCHEDULED_MACHINE_ID = "scheduled_machine_id"
SCHEDULED_START_TIME = "scheduled_start_time"
SCHEDULED_END_TIME = "scheduled_end_time"
STATUS = "status"
COLOR = "color"

SCHEDULING_FIELDS = (
    SCHEDULED_MACHINE_ID,
    SCHEDULED_START_TIME,
    SCHEDULED_END_TIME,
    STATUS,
    COLOR,
)

ODP_PREFIX = "OP"


class ProductionOrder(Entity):
    """
    Production order entity.

    The order catalog is the single source of truth for scheduling state.
    ``scheduled_machine_id`` is set iff both scheduled instants are set iff
    ``status`` is SCHEDULED.
    """

    odp_number: str = Field(min_length=1)
    article_code: str | None = None
    bag_width: float = Field(gt=0)
    bag_height: float = Field(gt=0)
    bag_step: float = Field(gt=0)
    department: Department
    phase_id: str | None = None
    quantity: int = Field(gt=0)
    # Hours, computed upstream from the phase parameters
    duration: float = Field(default=0, ge=0)

    scheduled_machine_id: str | None = None
    scheduled_start_time: datetime | None = None
    scheduled_end_time: datetime | None = None
    status: OrderStatus = OrderStatus.NOT_SCHEDULED
    color: str | None = None

    @field_validator("scheduled_start_time", "scheduled_end_time")
    @classmethod
    def normalize_instant(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_scheduling_fields(self) -> "ProductionOrder":
        scheduled = self.status == OrderStatus.SCHEDULED
        present = (
            self.scheduled_machine_id is not None,
            self.scheduled_start_time is not None,
            self.scheduled_end_time is not None,
        )
        if any(present) != scheduled or any(present) != all(present):
            raise ValueError(
                "scheduled_machine_id, scheduled_start_time and scheduled_end_time "
                "must all be set exactly when status is SCHEDULED"
            )
        if scheduled and self.scheduled_end_time <= self.scheduled_start_time:  # type: ignore[operator]
            raise ValueError("scheduled_end_time must be after scheduled_start_time")
        if self.bag_width < self.bag_step:
            raise ValueError("Bag width must be greater than or equal to bag step")
        return self

    @property
    def is_scheduled(self) -> bool:
        return self.status == OrderStatus.SCHEDULED

    @property
    def time_window(self) -> TimeWindow | None:
        """Scheduled range, or None when the order is not on the calendar."""
        if not self.is_scheduled:
            return None
        return TimeWindow(self.scheduled_start_time, self.scheduled_end_time)  # type: ignore[arg-type]

    @staticmethod
    def scheduled_fields(machine_id: str, window: TimeWindow) -> dict[str, Any]:
        """Partial update that places an order on ``machine_id`` over ``window``."""
        return {
            SCHEDULED_MACHINE_ID: machine_id,
            SCHEDULED_START_TIME: window.start_time.isoformat(),
            SCHEDULED_END_TIME: window.end_time.isoformat(),
            STATUS: OrderStatus.SCHEDULED.value,
        }

    @staticmethod
    def cleared_fields() -> dict[str, Any]:
        """Partial update that takes an order off the calendar."""
        return {
            SCHEDULED_MACHINE_ID: None,
            SCHEDULED_START_TIME: None,
            SCHEDULED_END_TIME: None,
            STATUS: OrderStatus.NOT_SCHEDULED.value,
        }

    def apply_fields(self, fields: dict[str, Any]) -> "ProductionOrder":
        """
        Return this order with a partial update applied.

        Raises:
            InvalidCatalogEntryError: If the result breaks an order invariant
        """
        try:
            return self.evolve(**fields)
        except ValidationError as e:
            raise InvalidCatalogEntryError("order", str(e)) from e

    @staticmethod
    def create(**data) -> "ProductionOrder":
        """
        Factory method to create a new ProductionOrder from catalog data.

        Raises:
            InvalidCatalogEntryError: If the data breaks an order invariant
        """
        try:
            return ProductionOrder.model_validate(data)
        except ValidationError as e:
            raise InvalidCatalogEntryError("order", str(e)) from e


def generate_odp_number(existing_odp_numbers: Iterable[str | None]) -> str:
    """
    Get the next ODP number in sequence.

    Numbers look like ``OP000123``; entries without the prefix or with a
    non-numeric tail are ignored.
    """
    highest = 0
    for number in existing_odp_numbers:
        if not number or not number.startswith(ODP_PREFIX):
            continue
        tail = number[len(ODP_PREFIX):]
        if tail.isdigit():
            highest = max(highest, int(tail))
    return f"{ODP_PREFIX}{highest + 1:06d}"
