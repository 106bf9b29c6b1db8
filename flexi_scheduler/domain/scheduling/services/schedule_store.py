"""
Schedule Store

In-memory projection of the machine and order catalogs. Scheduled events are
derived from the orders' scheduling fields on every read and are never kept
as a separate collection.
"""

from collections.abc import Iterable
from datetime import date

from ...shared.base import DomainService
from ..entities.machine import Machine
from ..entities.production_order import ProductionOrder
from ..entities.scheduled_event import ScheduledEvent
from ..value_objects.time_grid import day_bounds
from ..value_objects.time_window import TimeWindow


class ScheduleStore(DomainService):
    """
    Projection of the catalogs used by the scheduler and the renderer.

    ``rebuild`` replaces the whole snapshot whenever the catalogs change;
    ``upsert_order`` applies the result of a single successful write.
    """

    def __init__(self) -> None:
        self._machines: dict[str, Machine] = {}
        self._orders: dict[str, ProductionOrder] = {}

    def rebuild(
        self, machines: Iterable[Machine], orders: Iterable[ProductionOrder]
    ) -> None:
        self._machines = {machine.id: machine for machine in machines}
        self._orders = {order.id: order for order in orders}

    def upsert_order(self, order: ProductionOrder) -> None:
        self._orders[order.id] = order

    def remove_order(self, order_id: str) -> None:
        self._orders.pop(order_id, None)

    @property
    def machines(self) -> list[Machine]:
        return list(self._machines.values())

    @property
    def orders(self) -> list[ProductionOrder]:
        return list(self._orders.values())

    def get_machine(self, machine_id: str) -> Machine | None:
        return self._machines.get(machine_id)

    def get_order(self, order_id: str) -> ProductionOrder | None:
        return self._orders.get(order_id)

    def find_machine(self, reference: str) -> Machine | None:
        """Resolve a machine by ID, falling back to its display key."""
        machine = self._machines.get(reference)
        if machine is not None:
            return machine
        return next(
            (m for m in self._machines.values() if m.display_key == reference), None
        )

    def resolve_machine_id(self, reference: str) -> str:
        """Catalog ID a machine reference points at; unknown references pass through."""
        machine = self.find_machine(reference)
        return machine.id if machine is not None else reference

    def scheduled_orders(self) -> list[ProductionOrder]:
        return [order for order in self._orders.values() if order.is_scheduled]

    def unscheduled_orders(self) -> list[ProductionOrder]:
        """Orders waiting in the backlog pool."""
        return [order for order in self._orders.values() if not order.is_scheduled]

    def events(self) -> list[ScheduledEvent]:
        """One event per scheduled order, ordered by machine then start time."""
        events = [ScheduledEvent.from_order(o) for o in self.scheduled_orders()]
        events.sort(key=lambda e: (e.machine_id, e.start_time))
        return events

    def events_for_machine(
        self, machine_id: str, exclude_order_id: str | None = None
    ) -> list[ScheduledEvent]:
        """Events placed on the machine, whether referenced by ID or display key."""
        target = self.resolve_machine_id(machine_id)
        return [
            event
            for event in self.events()
            if self.resolve_machine_id(event.machine_id) == target
            and event.order_id != exclude_order_id
        ]

    def events_for_day(self, day: date) -> list[ScheduledEvent]:
        """Events with any part falling on ``day``."""
        bounds = day_bounds(day)
        return [e for e in self.events() if e.time_window.overlaps_with(bounds)]

    def conflicting_events(
        self,
        machine_id: str,
        window: TimeWindow,
        exclude_order_id: str | None = None,
    ) -> list[ScheduledEvent]:
        """Events on ``machine_id`` overlapping ``window`` (half-open)."""
        return [
            event
            for event in self.events_for_machine(machine_id, exclude_order_id)
            if event.time_window.overlaps_with(window)
        ]
