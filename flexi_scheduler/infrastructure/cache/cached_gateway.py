"""
Read-through cache in front of a persistence gateway.

Catalog reads are cached for a few seconds to collapse duplicate fetches
while a view renders. Every successful write clears the namespace of the
collection it touched, so the next read from the same client sees it.
"""

from datetime import date
from typing import Any

from aiocache import SimpleMemoryCache

from flexi_scheduler.core.config import settings
from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.scheduling.entities import (
    AvailabilityRecord,
    Machine,
    Phase,
    ProductionOrder,
)
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway

logger = get_logger(__name__)

MACHINES_NAMESPACE = "machines"
ORDERS_NAMESPACE = "orders"
PHASES_NAMESPACE = "phases"
AVAILABILITY_NAMESPACE = "availability"


class CachedPersistenceGateway(PersistenceGateway):
    """Decorates another gateway with a short-lived, namespaced read cache."""

    def __init__(
        self,
        inner: PersistenceGateway,
        ttl_seconds: int | None = None,
        cache: SimpleMemoryCache | None = None,
    ) -> None:
        self._inner = inner
        self._ttl = settings.READ_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._cache = cache or SimpleMemoryCache()

    async def _cached(self, namespace: str, key: str, loader):
        if self._ttl <= 0:
            return await loader()
        value = await self._cache.get(key, namespace=namespace)
        if value is not None:
            logger.debug("cache_hit", namespace=namespace, key=key)
            return value
        logger.debug("cache_miss", namespace=namespace, key=key)
        value = await loader()
        await self._cache.set(key, value, ttl=self._ttl, namespace=namespace)
        return value

    async def invalidate(self, *namespaces: str) -> None:
        for namespace in namespaces:
            await self._cache.clear(namespace=namespace)
        logger.debug("cache_invalidated", namespaces=list(namespaces))

    async def list_machines(self) -> list[Machine]:
        return await self._cached(MACHINES_NAMESPACE, "all", self._inner.list_machines)

    async def list_orders(self) -> list[ProductionOrder]:
        return await self._cached(ORDERS_NAMESPACE, "all", self._inner.list_orders)

    async def get_order(self, order_id: str) -> ProductionOrder | None:
        orders = await self.list_orders()
        return next((o for o in orders if o.id == order_id), None)

    async def update_order(
        self, order_id: str, fields: dict[str, Any]
    ) -> ProductionOrder:
        updated = await self._inner.update_order(order_id, fields)
        await self.invalidate(ORDERS_NAMESPACE)
        return updated

    async def get_availability(self, machine_id: str, day: date) -> list[int]:
        return await self._cached(
            AVAILABILITY_NAMESPACE,
            f"{machine_id}:{day.isoformat()}",
            lambda: self._inner.get_availability(machine_id, day),
        )

    async def set_availability(
        self, machine_id: str, day: date, hours: list[int]
    ) -> None:
        await self._inner.set_availability(machine_id, day, hours)
        await self.invalidate(AVAILABILITY_NAMESPACE)

    async def list_availability(
        self,
        machine_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AvailabilityRecord]:
        key = f"list:{machine_id}:{start}:{end}"
        return await self._cached(
            AVAILABILITY_NAMESPACE,
            key,
            lambda: self._inner.list_availability(machine_id, start, end),
        )

    async def add_machine(self, machine: Machine) -> Machine:
        added = await self._inner.add_machine(machine)
        await self.invalidate(MACHINES_NAMESPACE)
        return added

    async def delete_machine(self, machine_id: str) -> bool:
        deleted = await self._inner.delete_machine(machine_id)
        await self.invalidate(MACHINES_NAMESPACE)
        return deleted

    async def add_order(self, order: ProductionOrder) -> ProductionOrder:
        added = await self._inner.add_order(order)
        await self.invalidate(ORDERS_NAMESPACE)
        return added

    async def delete_order(self, order_id: str) -> bool:
        deleted = await self._inner.delete_order(order_id)
        await self.invalidate(ORDERS_NAMESPACE)
        return deleted

    async def list_phases(self) -> list[Phase]:
        return await self._cached(PHASES_NAMESPACE, "all", self._inner.list_phases)

    async def add_phase(self, phase: Phase) -> Phase:
        added = await self._inner.add_phase(phase)
        await self.invalidate(PHASES_NAMESPACE)
        return added
