"""
Scheduler Engine

Orchestrates the schedule, unschedule and reschedule transitions of a
production order. Every placement is validated against machine
compatibility, machine availability and the other orders already on the
machine before a single partial update is written to the order catalog.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, NamedTuple

from ...shared.exceptions import (
    DomainError,
    MachineNotFoundError,
    OperationInProgressError,
    OrderAlreadyScheduledError,
    OrderNotFoundError,
    OrderNotScheduledError,
    PersistenceFailure,
    PreconditionFailure,
    StaleOperationError,
    ValidationFailure,
)
from ..entities.machine import Machine
from ..entities.production_order import ProductionOrder
from ..events.domain_events import (
    DomainEvent,
    EventPublisher,
    OrderRescheduled,
    OrderScheduled,
    OrderUnscheduled,
)
from ..repositories.persistence_gateway import PersistenceGateway
from ..value_objects.time_grid import covered_hours, slot_start
from ..value_objects.time_window import TimeWindow, as_utc
from .availability_index import AvailabilityIndex
from .compatibility import CompatibilityChecker
from .schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

ZERO_DURATION_REASON = "Order duration must be greater than zero"

DEFAULT_VIEW = "default"


class _Ticket(NamedTuple):
    """Generation a mutation started under, per client view."""

    view: str
    generation: int


class SchedulerEngine:
    """
    Scheduling state machine for production orders.

    States per order: NOT_SCHEDULED -> SCHEDULED -> NOT_SCHEDULED. Failures
    are raised as ``ValidationFailure`` (placement rejected) or
    ``PreconditionFailure`` (command does not apply); in both cases nothing
    is written. Only one mutation per order may be in flight at a time.

    Each client view has its own generation token; invalidating one view
    only discards the mutations that view started.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        store: ScheduleStore | None = None,
        availability: AvailabilityIndex | None = None,
        checker: CompatibilityChecker | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        """
        Initialize the scheduler engine.

        Args:
            gateway: Catalog access (usually the cached gateway)
            store: Projection rebuilt from the catalogs before each command
            availability: Unavailable-hours index
            checker: Machine/order compatibility rules
            publisher: Receives a notification after every successful mutation
        """
        self._gateway = gateway
        self._store = store or ScheduleStore()
        self._availability = availability or AvailabilityIndex()
        self._checker = checker or CompatibilityChecker()
        self._publisher = publisher
        self._in_flight: set[str] = set()
        self._generations: dict[str, int] = {}

    @property
    def store(self) -> ScheduleStore:
        return self._store

    @property
    def availability(self) -> AvailabilityIndex:
        return self._availability

    def generation(self, view: str = DEFAULT_VIEW) -> int:
        return self._generations.get(view, 0)

    def invalidate_pending(self, view: str = DEFAULT_VIEW) -> int:
        """
        Discard the results of every mutation ``view`` still has in flight.

        Called when the view navigates away or re-renders; a write that
        resolves afterwards is not applied to the store nor announced.
        Mutations started by other views are unaffected.

        Returns:
            The new generation
        """
        self._generations[view] = self.generation(view) + 1
        logger.debug(
            "Scheduler generation of view %s bumped to %d",
            view,
            self._generations[view],
        )
        return self._generations[view]

    def is_in_progress(self, order_id: str) -> bool:
        return order_id in self._in_flight

    async def refresh(self) -> None:
        """Reload the catalogs and rebuild the projection and availability index."""
        machines = await self._gateway.list_machines()
        orders = await self._gateway.list_orders()
        records = await self._gateway.list_availability()
        self._store.rebuild(machines, orders)
        self._availability.clear()
        for record in records:
            self._availability.load(record)

    def validate_placement(
        self, order: ProductionOrder, machine: Machine, start_time: datetime
    ) -> list[str]:
        """
        Collect every reason ``order`` cannot start on ``machine`` at ``start_time``.

        Reads the current projection only; nothing is written.

        Returns:
            Human-readable reasons; empty when the placement is valid
        """
        reasons = list(self._checker.check(machine, order).reasons)
        if order.duration <= 0:
            reasons.append(ZERO_DURATION_REASON)
            return reasons

        window = TimeWindow.from_duration(start_time, order.duration)
        for day, hours in covered_hours(window.start_time, window.end_time).items():
            if not self._availability.is_available(machine.id, day, hours):
                blocked = sorted(
                    set(hours) & set(self._availability.unavailable_hours(machine.id, day))
                )
                reasons.append(
                    f"Machine {machine.machine_name} is unavailable on "
                    f"{day.isoformat()} at hours {blocked}"
                )

        for event in self._store.conflicting_events(
            machine.id, window, exclude_order_id=order.id
        ):
            reasons.append(
                f"Time slot overlaps with {event.title or event.order_id} on "
                f"{machine.machine_name} "
                f"({event.start_time:%Y-%m-%d %H:%M}-{event.end_time:%Y-%m-%d %H:%M})"
            )
        return reasons

    async def schedule(
        self,
        order_id: str,
        machine_id: str,
        start_time: datetime,
        view: str = DEFAULT_VIEW,
    ) -> ProductionOrder:
        """
        Place an unscheduled order on a machine.

        Args:
            order_id: Order to place
            machine_id: Target machine (ID or display key)
            start_time: Start instant; the end is start + order duration
            view: Client view whose generation token guards the result

        Returns:
            The updated order

        Raises:
            PreconditionFailure: Order missing or not unscheduled, machine missing
            ValidationFailure: Incompatible, unavailable or overlapping placement
            PersistenceFailure: The write failed
            StaleOperationError: The view moved on before the write resolved
        """
        with self._operation(order_id, view) as ticket:
            await self.refresh()
            order = self._require_order(order_id)
            return await self._schedule(order, machine_id, as_utc(start_time), ticket)

    async def unschedule(
        self, order_id: str, view: str = DEFAULT_VIEW
    ) -> ProductionOrder:
        """
        Take a scheduled order off the calendar.

        Raises:
            PreconditionFailure: Order missing or not scheduled
            PersistenceFailure: The write failed
            StaleOperationError: The view moved on before the write resolved
        """
        with self._operation(order_id, view) as ticket:
            await self.refresh()
            order = self._require_order(order_id)
            return await self._unschedule(order, ticket)

    async def reschedule(
        self,
        order_id: str,
        new_machine_id: str,
        new_start_time: datetime,
        view: str = DEFAULT_VIEW,
    ) -> ProductionOrder:
        """
        Move a scheduled order to a new machine and/or start time.

        The move is one partial update: when the target fails validation the
        order keeps its original placement and is never transiently free.

        Raises:
            PreconditionFailure: Order missing or not scheduled, machine missing
            ValidationFailure: Incompatible, unavailable or overlapping target
            PersistenceFailure: The write failed
            StaleOperationError: The view moved on before the write resolved
        """
        with self._operation(order_id, view) as ticket:
            await self.refresh()
            order = self._require_order(order_id)
            return await self._reschedule(
                order, new_machine_id, as_utc(new_start_time), ticket
            )

    async def drop_on_slot(
        self,
        order_id: str,
        machine_id: str,
        day: date,
        slot: int,
        view: str = DEFAULT_VIEW,
    ) -> ProductionOrder:
        """
        Handle an order dropped on a machine's grid slot.

        Schedules an order coming from the pool, reschedules one already on
        the calendar.
        """
        start_time = slot_start(day, slot)
        with self._operation(order_id, view) as ticket:
            await self.refresh()
            order = self._require_order(order_id)
            if order.is_scheduled:
                return await self._reschedule(order, machine_id, start_time, ticket)
            return await self._schedule(order, machine_id, start_time, ticket)

    async def drop_on_pool(
        self, order_id: str, view: str = DEFAULT_VIEW
    ) -> ProductionOrder:
        """Handle an order dropped back on the backlog pool (unschedule)."""
        return await self.unschedule(order_id, view)

    async def _schedule(
        self,
        order: ProductionOrder,
        machine_id: str,
        start_time: datetime,
        ticket: _Ticket,
    ) -> ProductionOrder:
        if order.is_scheduled:
            raise OrderAlreadyScheduledError(order.id)
        if not order.status.is_schedulable:
            raise PreconditionFailure(
                f"Order {order.id} cannot be scheduled (status: {order.status.value})",
                {"order_id": order.id, "status": order.status.value},
            )
        machine = self._require_machine(machine_id)
        window = self._validated_window(order, machine, start_time)
        self._check_generation(order.id, ticket)

        updated = await self._write(
            order.id, ProductionOrder.scheduled_fields(machine.id, window), "schedule"
        )
        self._commit(updated, ticket)
        logger.info(
            "Scheduled order %s on machine %s from %s to %s",
            order.odp_number,
            machine.machine_name,
            window.start_time.isoformat(),
            window.end_time.isoformat(),
        )
        await self._publish(
            OrderScheduled(
                order_id=order.id,
                machine_id=machine.id,
                start_time=window.start_time,
                end_time=window.end_time,
            )
        )
        return updated

    async def _unschedule(
        self, order: ProductionOrder, ticket: _Ticket
    ) -> ProductionOrder:
        if not order.is_scheduled:
            raise OrderNotScheduledError(order.id, order.status.value)
        previous_machine_id = order.scheduled_machine_id
        self._check_generation(order.id, ticket)

        updated = await self._write(
            order.id, ProductionOrder.cleared_fields(), "unschedule"
        )
        self._commit(updated, ticket)
        logger.info(
            "Unscheduled order %s from machine %s", order.odp_number, previous_machine_id
        )
        await self._publish(
            OrderUnscheduled(order_id=order.id, previous_machine_id=previous_machine_id)
        )
        return updated

    async def _reschedule(
        self,
        order: ProductionOrder,
        machine_id: str,
        start_time: datetime,
        ticket: _Ticket,
    ) -> ProductionOrder:
        if not order.is_scheduled:
            raise OrderNotScheduledError(order.id, order.status.value)
        old_machine_id = order.scheduled_machine_id
        machine = self._require_machine(machine_id)
        window = self._validated_window(order, machine, start_time)
        self._check_generation(order.id, ticket)

        updated = await self._write(
            order.id, ProductionOrder.scheduled_fields(machine.id, window), "reschedule"
        )
        self._commit(updated, ticket)
        logger.info(
            "Rescheduled order %s from machine %s to %s starting %s",
            order.odp_number,
            old_machine_id,
            machine.machine_name,
            window.start_time.isoformat(),
        )
        await self._publish(
            OrderRescheduled(
                order_id=order.id,
                old_machine_id=old_machine_id,  # type: ignore[arg-type]
                new_machine_id=machine.id,
                start_time=window.start_time,
                end_time=window.end_time,
            )
        )
        return updated

    def _validated_window(
        self, order: ProductionOrder, machine: Machine, start_time: datetime
    ) -> TimeWindow:
        reasons = self.validate_placement(order, machine, start_time)
        if reasons:
            logger.info(
                "Rejected placement of order %s on machine %s: %s",
                order.odp_number,
                machine.machine_name,
                "; ".join(reasons),
            )
            raise ValidationFailure(
                f"Cannot place order {order.odp_number} on machine {machine.machine_name}",
                reasons,
                {"order_id": order.id, "machine_id": machine.id},
            )
        return TimeWindow.from_duration(start_time, order.duration)

    def _require_order(self, order_id: str) -> ProductionOrder:
        order = self._store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _require_machine(self, machine_id: str) -> Machine:
        machine = self._store.find_machine(machine_id)
        if machine is None:
            raise MachineNotFoundError(machine_id)
        return machine

    async def _write(
        self, order_id: str, fields: dict[str, Any], operation: str
    ) -> ProductionOrder:
        try:
            return await self._gateway.update_order(order_id, fields)
        except DomainError:
            raise
        except Exception as e:
            logger.error("Failed to %s order %s: %s", operation, order_id, e)
            raise PersistenceFailure(
                f"Failed to {operation} order {order_id}: {e}", operation
            ) from e

    def _check_generation(self, order_id: str, ticket: _Ticket) -> None:
        current = self.generation(ticket.view)
        if ticket.generation != current:
            logger.warning(
                "Discarding stale result for order %s of view %s", order_id, ticket.view
            )
            raise StaleOperationError(order_id, ticket.generation, current)

    def _commit(self, order: ProductionOrder, ticket: _Ticket) -> None:
        self._check_generation(order.id, ticket)
        self._store.upsert_order(order)

    async def _publish(self, event: DomainEvent) -> None:
        if self._publisher is not None:
            await self._publisher.publish_async(event)

    @contextmanager
    def _operation(self, order_id: str, view: str) -> Iterator[_Ticket]:
        if order_id in self._in_flight:
            raise OperationInProgressError(order_id)
        self._in_flight.add(order_id)
        try:
            yield _Ticket(view, self.generation(view))
        finally:
            self._in_flight.discard(order_id)
