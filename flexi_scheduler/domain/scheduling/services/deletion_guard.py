"""Deletion guard for production orders."""

from ...shared.exceptions import OrderScheduledError
from ..entities.production_order import ProductionOrder


class OrderDeletionGuard:
    """Rejects deleting an order that is still on the calendar."""

    def ensure_deletable(self, order: ProductionOrder) -> None:
        """
        Raises:
            OrderScheduledError: If the order is SCHEDULED
        """
        if order.is_scheduled:
            raise OrderScheduledError(order.id, order.odp_number)
