from datetime import datetime, timezone

import pytest

from flexi_scheduler.domain.scheduling.events import (
    DomainEvent,
    OrderScheduled,
    OrderUnscheduled,
)
from flexi_scheduler.infrastructure.events import InMemoryEventBus

START = datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
END = datetime(2024, 1, 1, 10, tzinfo=timezone.utc)


def scheduled_event() -> OrderScheduled:
    return OrderScheduled(
        order_id="O1", machine_id="M1", start_time=START, end_time=END
    )


class TestInMemoryEventBus:
    """Test the in-process event bus."""

    def test_sync_handlers_receive_matching_events(self):
        bus = InMemoryEventBus()
        received = []
        bus.subscribe(OrderScheduled, received.append)

        bus.publish(scheduled_event())
        bus.publish(OrderUnscheduled(order_id="O1"))

        assert [type(e) for e in received] == [OrderScheduled]
        assert len(bus.get_event_history()) == 2

    @pytest.mark.asyncio
    async def test_async_handlers_awaited_by_publish_async(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event.order_id)

        bus.subscribe(OrderScheduled, handler)
        await bus.publish_async(scheduled_event())
        assert received == ["O1"]

    def test_publish_skips_async_handlers(self):
        bus = InMemoryEventBus()
        calls = []

        async def handler(event):
            calls.append(event)

        bus.subscribe(OrderScheduled, handler)
        bus.publish(scheduled_event())
        assert calls == []

    @pytest.mark.asyncio
    async def test_base_subscription_receives_everything(self):
        bus = InMemoryEventBus()
        received = []
        bus.subscribe(DomainEvent, received.append)

        await bus.publish_async(scheduled_event())
        await bus.publish_async(OrderUnscheduled(order_id="O1"))
        assert len(received) == 2

    def test_failing_handler_does_not_stop_others(self):
        bus = InMemoryEventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(OrderScheduled, broken)
        bus.subscribe(OrderScheduled, received.append)
        bus.publish(scheduled_event())
        assert len(received) == 1

    def test_subscribe_unsubscribe(self):
        bus = InMemoryEventBus()
        bus.subscribe(OrderScheduled, print)
        bus.subscribe(OrderScheduled, print)
        assert bus.get_handler_count(OrderScheduled) == 1
        bus.unsubscribe(OrderScheduled, print)
        assert bus.get_handler_count(OrderScheduled) == 0

    def test_history_is_bounded_and_filterable(self):
        bus = InMemoryEventBus(max_history_size=2)
        bus.publish(scheduled_event())
        bus.publish(OrderUnscheduled(order_id="O1"))
        bus.publish(OrderUnscheduled(order_id="O2"))

        history = bus.get_event_history()
        assert [type(e) for e in history] == [OrderUnscheduled, OrderUnscheduled]
        assert bus.get_event_history(OrderScheduled) == []
        bus.clear_event_history()
        assert bus.get_event_history() == []

    def test_notification_payload(self):
        payload = scheduled_event().to_notification()
        assert payload["type"] == "scheduled"
        assert payload["orderId"] == "O1"
