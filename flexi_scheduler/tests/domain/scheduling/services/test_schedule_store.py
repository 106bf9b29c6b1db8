from datetime import date, datetime, timedelta, timezone

from hypothesis import given
from hypothesis import strategies as st

from flexi_scheduler.domain.scheduling.entities import ProductionOrder
from flexi_scheduler.domain.scheduling.services import ScheduleStore
from flexi_scheduler.domain.scheduling.value_objects import Department, TimeWindow

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def scheduled(order: ProductionOrder, machine_id: str, hour: int, hours: int = 2):
    start = BASE + timedelta(hours=hour)
    return order.apply_fields(
        ProductionOrder.scheduled_fields(
            machine_id, TimeWindow(start, start + timedelta(hours=hours))
        )
    )


def plain_order(n: int) -> ProductionOrder:
    return ProductionOrder.create(
        id=f"O{n}",
        odp_number=f"OP{n:06d}",
        bag_width=400,
        bag_height=300,
        bag_step=100,
        department=Department.PRINTING,
        quantity=10,
        duration=2,
    )


class TestScheduleStore:
    """Test the catalog projection."""

    def test_split_between_pool_and_calendar(self, m1, o1, o2):
        store = ScheduleStore()
        store.rebuild([m1], [scheduled(o1, "M1", 8), o2])
        assert [o.id for o in store.scheduled_orders()] == ["O1"]
        assert [o.id for o in store.unscheduled_orders()] == ["O2"]
        assert [e.order_id for e in store.events()] == ["O1"]

    def test_events_for_machine_and_day(self, m1, order_factory):
        a = scheduled(order_factory(id="A"), "M1", 8)
        b = scheduled(order_factory(id="B"), "M2", 8)
        c = scheduled(order_factory(id="C"), "M1", 23)  # runs into Jan 2
        store = ScheduleStore()
        store.rebuild([m1], [a, b, c])

        assert [e.order_id for e in store.events_for_machine("M1")] == ["A", "C"]
        assert [e.order_id for e in store.events_for_machine("M1", "A")] == ["C"]
        jan_2 = [e.order_id for e in store.events_for_day(date(2024, 1, 2))]
        assert jan_2 == ["C"]

    def test_conflicting_events_use_half_open_ranges(self, m1, o1):
        store = ScheduleStore()
        store.rebuild([m1], [scheduled(o1, "M1", 8)])
        touching = TimeWindow(BASE + timedelta(hours=10), BASE + timedelta(hours=12))
        overlapping = TimeWindow(BASE + timedelta(hours=9), BASE + timedelta(hours=11))
        assert store.conflicting_events("M1", touching) == []
        assert [e.order_id for e in store.conflicting_events("M1", overlapping)] == [
            "O1"
        ]
        assert store.conflicting_events("M1", overlapping, exclude_order_id="O1") == []

    def test_upsert_replaces_the_order(self, m1, o1):
        store = ScheduleStore()
        store.rebuild([m1], [o1])
        store.upsert_order(scheduled(o1, "M1", 8))
        assert len(store.events()) == 1
        store.remove_order("O1")
        assert store.events() == []

    def test_find_machine_by_id_or_display_key(self, m1):
        store = ScheduleStore()
        store.rebuild([m1], [])
        assert store.find_machine("M1") == m1
        assert store.find_machine("Flexo 1") == m1
        assert store.find_machine("Flexo 9") is None

    def test_events_for_machine_match_name_references(self, m1, order_factory):
        by_id = scheduled(order_factory(id="A"), "M1", 8)
        by_name = scheduled(order_factory(id="B"), "Flexo 1", 12)
        store = ScheduleStore()
        store.rebuild([m1], [by_id, by_name])

        assert [e.order_id for e in store.events_for_machine("M1")] == ["A", "B"]
        assert [e.order_id for e in store.events_for_machine("Flexo 1")] == ["A", "B"]
        overlapping = TimeWindow(BASE + timedelta(hours=13), BASE + timedelta(hours=14))
        assert [e.order_id for e in store.conflicting_events("M1", overlapping)] == [
            "B"
        ]

    @given(st.lists(st.booleans(), max_size=20))
    def test_exactly_one_event_per_scheduled_order(self, flags):
        orders = [
            scheduled(plain_order(i), "M1", i % 20) if flag else plain_order(i)
            for i, flag in enumerate(flags)
        ]
        store = ScheduleStore()
        store.rebuild([], orders)
        event_order_ids = [e.order_id for e in store.events()]
        expected = {o.id for o in orders if o.is_scheduled}
        assert sorted(event_order_ids) == sorted(expected)
        assert len(event_order_ids) == len(set(event_order_ids))
