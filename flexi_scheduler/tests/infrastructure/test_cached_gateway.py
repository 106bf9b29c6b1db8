from datetime import date
from unittest.mock import patch

import pytest

from flexi_scheduler.domain.scheduling.entities import ProductionOrder
from flexi_scheduler.infrastructure.cache import CachedPersistenceGateway


@pytest.fixture
def cached(gateway):
    return CachedPersistenceGateway(gateway, ttl_seconds=60)


class TestCachedPersistenceGateway:
    """Test the read-through cache."""

    @pytest.mark.asyncio
    async def test_repeated_reads_hit_inner_once(self, cached, gateway):
        with patch.object(gateway, "list_orders", wraps=gateway.list_orders) as inner:
            await cached.list_orders()
            await cached.list_orders()
            await cached.get_order("O1")
        assert inner.await_count == 1

    @pytest.mark.asyncio
    async def test_write_invalidates_its_collection(self, cached):
        assert not (await cached.get_order("O1")).is_scheduled
        await cached.update_order("O1", {"color": "#00ff00"})
        assert (await cached.get_order("O1")).color == "#00ff00"

    @pytest.mark.asyncio
    async def test_write_does_not_invalidate_other_collections(self, cached, gateway):
        await cached.list_machines()
        with patch.object(
            gateway, "list_machines", wraps=gateway.list_machines
        ) as inner:
            await cached.update_order("O1", ProductionOrder.cleared_fields())
            await cached.list_machines()
        inner.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_availability_writes_are_visible(self, cached):
        day = date(2024, 1, 1)
        assert await cached.get_availability("M1", day) == []
        assert await cached.list_availability() == []
        await cached.set_availability("M1", day, [8])
        assert await cached.get_availability("M1", day) == [8]
        assert [r.sorted_hours() for r in await cached.list_availability()] == [[8]]

    @pytest.mark.asyncio
    async def test_deleting_order_invalidates(self, cached):
        await cached.list_orders()
        assert await cached.delete_order("O2") is True
        assert [o.id for o in await cached.list_orders()] == ["O1"]

    @pytest.mark.asyncio
    async def test_zero_ttl_bypasses_cache(self, gateway):
        cached = CachedPersistenceGateway(gateway, ttl_seconds=0)
        with patch.object(gateway, "list_orders", wraps=gateway.list_orders) as inner:
            await cached.list_orders()
            await cached.list_orders()
        assert inner.await_count == 2
