"""
In-memory persistence gateway.

Keeps each catalog as a key-value collection of JSON-ready rows, so every
read goes through the same ISO-8601 round trip as a remote backend.
"""

from datetime import date
from typing import Any

from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.scheduling.entities import (
    AvailabilityRecord,
    Machine,
    Phase,
    ProductionOrder,
)
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway
from flexi_scheduler.domain.shared.exceptions import OrderNotFoundError

logger = get_logger(__name__)


class InMemoryPersistenceGateway(PersistenceGateway):
    """Local key-value implementation of the persistence gateway."""

    def __init__(
        self,
        machines: list[Machine] | None = None,
        orders: list[ProductionOrder] | None = None,
        phases: list[Phase] | None = None,
        availability: list[AvailabilityRecord] | None = None,
    ) -> None:
        self._machines: dict[str, dict[str, Any]] = {}
        self._orders: dict[str, dict[str, Any]] = {}
        self._phases: dict[str, dict[str, Any]] = {}
        self._availability: dict[tuple[str, str], list[int]] = {}

        for machine in machines or []:
            self._machines[machine.id] = machine.model_dump(mode="json")
        for order in orders or []:
            self._orders[order.id] = order.model_dump(mode="json")
        for phase in phases or []:
            self._phases[phase.id] = phase.model_dump(mode="json")
        for record in availability or []:
            self._availability[(record.machine_id, record.date.isoformat())] = (
                record.sorted_hours()
            )

    async def list_machines(self) -> list[Machine]:
        return [Machine.model_validate(row) for row in self._machines.values()]

    async def list_orders(self) -> list[ProductionOrder]:
        return [ProductionOrder.model_validate(row) for row in self._orders.values()]

    async def get_order(self, order_id: str) -> ProductionOrder | None:
        row = self._orders.get(order_id)
        return ProductionOrder.model_validate(row) if row is not None else None

    async def update_order(
        self, order_id: str, fields: dict[str, Any]
    ) -> ProductionOrder:
        order = await self.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        updated = order.apply_fields(fields)
        self._orders[order_id] = updated.model_dump(mode="json")
        logger.debug("order_updated", order_id=order_id, fields=sorted(fields))
        return updated

    async def get_availability(self, machine_id: str, day: date) -> list[int]:
        return list(self._availability.get((machine_id, day.isoformat()), []))

    async def set_availability(
        self, machine_id: str, day: date, hours: list[int]
    ) -> None:
        key = (machine_id, day.isoformat())
        record = AvailabilityRecord(
            machine_id=machine_id, date=day, unavailable_hours=hours
        )
        if record.unavailable_hours:
            self._availability[key] = record.sorted_hours()
        else:
            self._availability.pop(key, None)

    async def list_availability(
        self,
        machine_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AvailabilityRecord]:
        records = []
        for (record_machine_id, iso_day), hours in sorted(self._availability.items()):
            day = date.fromisoformat(iso_day)
            if machine_id is not None and record_machine_id != machine_id:
                continue
            if (start is not None and day < start) or (end is not None and day > end):
                continue
            records.append(
                AvailabilityRecord(
                    machine_id=record_machine_id, date=day, unavailable_hours=hours
                )
            )
        return records

    async def add_machine(self, machine: Machine) -> Machine:
        self._machines[machine.id] = machine.model_dump(mode="json")
        return machine

    async def delete_machine(self, machine_id: str) -> bool:
        return self._machines.pop(machine_id, None) is not None

    async def add_order(self, order: ProductionOrder) -> ProductionOrder:
        self._orders[order.id] = order.model_dump(mode="json")
        return order

    async def delete_order(self, order_id: str) -> bool:
        return self._orders.pop(order_id, None) is not None

    async def list_phases(self) -> list[Phase]:
        return [Phase.model_validate(row) for row in self._phases.values()]

    async def add_phase(self, phase: Phase) -> Phase:
        self._phases[phase.id] = phase.model_dump(mode="json")
        return phase
