"""Order catalog API Routes."""

from fastapi import APIRouter, Response, status

from flexi_scheduler.api.deps import OrderCatalogDep

router = APIRouter(prefix="/orders", tags=["orders"])


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: str, catalog: OrderCatalogDep) -> Response:
    """
    Delete an order from the backlog.

    A scheduled order is rejected with 409; unschedule it first.
    """
    await catalog.delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
