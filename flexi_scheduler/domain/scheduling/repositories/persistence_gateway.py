"""
Persistence Gateway Interface

Defines the contract for catalog data access: machines, orders, phases and
availability records. The backend (local store or SQL database) is chosen by
configuration; the scheduling core only sees this interface.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from ..entities.availability import AvailabilityRecord
from ..entities.machine import Machine
from ..entities.phase import Phase
from ..entities.production_order import ProductionOrder


class PersistenceGateway(ABC):
    """
    Abstract gateway for the machine, order, phase and availability catalogs.

    Implementations raise ``PersistenceFailure`` when the backend fails and
    never retry on their own.
    """

    @abstractmethod
    async def list_machines(self) -> list[Machine]:
        """
        Retrieve all machines.

        Returns:
            List of all machine entities

        Raises:
            PersistenceFailure: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_orders(self) -> list[ProductionOrder]:
        """
        Retrieve all production orders.

        Returns:
            List of all order entities

        Raises:
            PersistenceFailure: If retrieval fails
        """
        pass

    @abstractmethod
    async def get_order(self, order_id: str) -> ProductionOrder | None:
        """
        Retrieve one order by its ID.

        Returns:
            Order entity or None if not found
        """
        pass

    @abstractmethod
    async def update_order(
        self, order_id: str, fields: dict[str, Any]
    ) -> ProductionOrder:
        """
        Apply a partial update to an order.

        Scheduling fields may be set to None. Instants arrive as ISO-8601
        strings or datetimes.

        Args:
            order_id: Order to update
            fields: Field names and new values

        Returns:
            The updated order

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidCatalogEntryError: If the update breaks an order invariant
            PersistenceFailure: If the write fails
        """
        pass

    @abstractmethod
    async def get_availability(self, machine_id: str, day: date) -> list[int]:
        """
        Get the unavailable hours of a machine on one date.

        Returns:
            Sorted hours (0-23); empty when no record exists
        """
        pass

    @abstractmethod
    async def set_availability(
        self, machine_id: str, day: date, hours: list[int]
    ) -> None:
        """
        Replace the unavailable hours of a machine on one date.

        Raises:
            PersistenceFailure: If the write fails
        """
        pass

    @abstractmethod
    async def list_availability(
        self,
        machine_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AvailabilityRecord]:
        """
        Retrieve availability records, optionally filtered by machine and by
        the inclusive date range ``[start, end]``.
        """
        pass

    @abstractmethod
    async def add_machine(self, machine: Machine) -> Machine:
        """Insert a machine into the catalog."""
        pass

    @abstractmethod
    async def delete_machine(self, machine_id: str) -> bool:
        """
        Delete a machine.

        Returns:
            True if a machine was deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def add_order(self, order: ProductionOrder) -> ProductionOrder:
        """Insert an order into the catalog."""
        pass

    @abstractmethod
    async def delete_order(self, order_id: str) -> bool:
        """
        Delete an order.

        Callers run the deletion guard first; the gateway does not check
        scheduling state.

        Returns:
            True if an order was deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def list_phases(self) -> list[Phase]:
        """Retrieve all processing phases."""
        pass

    @abstractmethod
    async def add_phase(self, phase: Phase) -> Phase:
        """Insert a processing phase."""
        pass
