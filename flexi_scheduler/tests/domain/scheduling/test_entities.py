"""
Unit tests for scheduling entities.

Covers machine catalog invariants, the order scheduling-field invariant,
event projection and availability records.
"""

from datetime import date, datetime, timezone

import pytest

from flexi_scheduler.domain.scheduling.entities import (
    SCHEDULING_FIELDS,
    AvailabilityRecord,
    ProductionOrder,
    ScheduledEvent,
    generate_odp_number,
)
from flexi_scheduler.domain.scheduling.value_objects import (
    Department,
    MachineStatus,
    MachineType,
    OrderStatus,
    TimeWindow,
)
from flexi_scheduler.domain.shared.exceptions import InvalidCatalogEntryError

START = datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
END = datetime(2024, 1, 1, 10, tzinfo=timezone.utc)


class TestMachine:
    """Test Machine entity invariants."""

    def test_valid_machine(self, m1):
        assert m1.display_key == "Flexo 1"
        assert m1.is_available_for_work

    def test_min_width_above_max_rejected(self, machine_factory):
        with pytest.raises(InvalidCatalogEntryError, match="web width"):
            machine_factory(min_web_width=600, max_web_width=500)

    def test_min_height_above_max_rejected(self, machine_factory):
        with pytest.raises(InvalidCatalogEntryError, match="bag height"):
            machine_factory(min_bag_height=500, max_bag_height=400)

    def test_negative_capacity_rejected(self, machine_factory):
        with pytest.raises(InvalidCatalogEntryError):
            machine_factory(max_web_width=-1)

    def test_machine_type_must_match_department(self, machine_factory):
        with pytest.raises(InvalidCatalogEntryError, match="not valid for department"):
            machine_factory(machine_type=MachineType.DOYPACK)

    def test_packaging_machine_requires_material_changeover(self, machine_factory):
        with pytest.raises(InvalidCatalogEntryError, match="Material changeover"):
            machine_factory(
                department=Department.PACKAGING,
                machine_type=MachineType.DOYPACK,
                changeover_color=None,
            )

    def test_machine_name_is_sanitized(self, machine_factory):
        assert machine_factory(machine_name="  Flexo 2  ").machine_name == "Flexo 2"
        with pytest.raises(InvalidCatalogEntryError):
            machine_factory(machine_name="Flexo <1>")

    def test_change_status_returns_new_instance(self, m1):
        stopped = m1.change_status(MachineStatus.MAINTENANCE)
        assert stopped.status == MachineStatus.MAINTENANCE
        assert not stopped.is_available_for_work
        assert m1.status == MachineStatus.ACTIVE
        assert stopped == m1  # same identity
        assert stopped.updated_at is not None

    def test_update_capacity(self, m1):
        assert m1.update_capacity(max_web_width=700).max_web_width == 700
        with pytest.raises(InvalidCatalogEntryError, match="unknown capacity fields"):
            m1.update_capacity(max_speed=10)
        with pytest.raises(InvalidCatalogEntryError):
            m1.update_capacity(min_web_width=800)


class TestProductionOrder:
    """Test the order scheduling-field invariant."""

    def test_new_order_is_unscheduled(self, o1):
        assert o1.status == OrderStatus.NOT_SCHEDULED
        assert not o1.is_scheduled
        assert o1.time_window is None

    def test_scheduled_fields_round_trip_as_iso_strings(self, o1):
        fields = ProductionOrder.scheduled_fields("M1", TimeWindow(START, END))
        assert fields == {
            "scheduled_machine_id": "M1",
            "scheduled_start_time": "2024-01-01T08:00:00+00:00",
            "scheduled_end_time": "2024-01-01T10:00:00+00:00",
            "status": "SCHEDULED",
        }
        scheduled = o1.apply_fields(fields)
        assert scheduled.is_scheduled
        assert scheduled.scheduled_start_time == START
        assert scheduled.time_window == TimeWindow(START, END)

    def test_cleared_fields_restore_unscheduled_state(self, o1):
        scheduled = o1.apply_fields(
            ProductionOrder.scheduled_fields("M1", TimeWindow(START, END))
        )
        cleared = scheduled.apply_fields(ProductionOrder.cleared_fields())
        assert cleared.scheduled_machine_id is None
        assert cleared.scheduled_start_time is None
        assert cleared.scheduled_end_time is None
        assert cleared.status == OrderStatus.NOT_SCHEDULED

    def test_partial_scheduling_fields_rejected(self, o1):
        with pytest.raises(InvalidCatalogEntryError, match="must all be set"):
            o1.apply_fields({"scheduled_machine_id": "M1"})
        with pytest.raises(InvalidCatalogEntryError, match="must all be set"):
            o1.apply_fields({"status": "SCHEDULED"})

    def test_end_must_follow_start(self, o1):
        with pytest.raises(InvalidCatalogEntryError, match="after"):
            o1.apply_fields(
                {
                    "scheduled_machine_id": "M1",
                    "scheduled_start_time": END,
                    "scheduled_end_time": START,
                    "status": "SCHEDULED",
                }
            )

    def test_bag_width_not_below_step(self, order_factory):
        with pytest.raises(InvalidCatalogEntryError, match="bag step"):
            order_factory(bag_width=100, bag_step=200)

    @pytest.mark.parametrize("field", ["bag_width", "bag_height", "bag_step", "quantity"])
    def test_dimensions_and_quantity_must_be_positive(self, order_factory, field):
        with pytest.raises(InvalidCatalogEntryError):
            order_factory(**{field: 0})

    def test_persisted_scheduling_field_names(self):
        assert SCHEDULING_FIELDS == (
            "scheduled_machine_id",
            "scheduled_start_time",
            "scheduled_end_time",
            "status",
            "color",
        )

    def test_generate_odp_number(self):
        assert generate_odp_number([]) == "OP000001"
        assert generate_odp_number(["OP000009", "OP000123", "X1", None, "OPabc"]) == (
            "OP000124"
        )


class TestScheduledEvent:
    """Test event projection from orders."""

    def test_projected_from_scheduled_order(self, o1):
        scheduled = o1.apply_fields(
            {
                **ProductionOrder.scheduled_fields("M1", TimeWindow(START, END)),
                "color": "#ff0000",
            }
        )
        event = ScheduledEvent.from_order(scheduled)
        assert event.order_id == "O1"
        assert event.machine_id == "M1"
        assert event.start_time == START
        assert event.end_time == END
        assert event.color == "#ff0000"
        assert event.title == "OP000001"

    def test_unscheduled_order_has_no_event(self, o1):
        with pytest.raises(ValueError, match="not scheduled"):
            ScheduledEvent.from_order(o1)

    def test_conflicts_need_same_machine_and_overlap(self):
        a = ScheduledEvent(
            id="a", order_id="O1", machine_id="M1", start_time=START, end_time=END
        )
        b = a.model_copy(update={"id": "b", "order_id": "O2"})
        c = b.model_copy(update={"machine_id": "M2"})
        d = b.model_copy(update={"start_time": END, "end_time": END.replace(hour=12)})
        assert a.conflicts_with(b)
        assert not a.conflicts_with(c)
        assert not a.conflicts_with(d)


class TestAvailabilityRecord:
    """Test availability records."""

    def test_hours_coerced_from_strings(self):
        record = AvailabilityRecord(
            machine_id="M1", date=date(2024, 1, 1), unavailable_hours=["8", 9]
        )
        assert record.sorted_hours() == [8, 9]

    def test_out_of_range_hours_rejected(self):
        with pytest.raises(ValueError):
            AvailabilityRecord(
                machine_id="M1", date=date(2024, 1, 1), unavailable_hours=[24]
            )
