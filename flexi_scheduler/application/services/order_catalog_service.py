"""Order catalog operations that must respect scheduling state."""

from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.scheduling.entities import (
    ProductionOrder,
    generate_odp_number,
)
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway
from flexi_scheduler.domain.scheduling.services import OrderDeletionGuard
from flexi_scheduler.domain.shared.exceptions import OrderNotFoundError

logger = get_logger(__name__)


class OrderCatalogService:
    """Creates and deletes backlog orders."""

    def __init__(
        self, gateway: PersistenceGateway, guard: OrderDeletionGuard | None = None
    ) -> None:
        self._gateway = gateway
        self._guard = guard or OrderDeletionGuard()

    async def create_order(self, **data) -> ProductionOrder:
        """
        Add an order to the backlog, numbering it when no ODP number is given.

        Raises:
            InvalidCatalogEntryError: If the data breaks an order invariant
        """
        if not data.get("odp_number"):
            existing = await self._gateway.list_orders()
            data["odp_number"] = generate_odp_number(o.odp_number for o in existing)
        order = ProductionOrder.create(**data)
        await self._gateway.add_order(order)
        logger.info("order_created", order_id=order.id, odp_number=order.odp_number)
        return order

    async def delete_order(self, order_id: str) -> None:
        """
        Delete an order from the catalog.

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderScheduledError: If the order is still scheduled
        """
        order = await self._gateway.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        self._guard.ensure_deletable(order)
        await self._gateway.delete_order(order_id)
        logger.info("order_deleted", order_id=order_id, odp_number=order.odp_number)
