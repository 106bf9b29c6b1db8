"""
Tests for the machine/order compatibility rules.

Includes property-based checks that the result is a pure function of its
inputs and that dimension violations are never missed.
"""

from hypothesis import given
from hypothesis import strategies as st

from flexi_scheduler.domain.scheduling.entities import Machine, ProductionOrder
from flexi_scheduler.domain.scheduling.services import CompatibilityChecker
from flexi_scheduler.domain.scheduling.services.compatibility import (
    MISSING_DATA_REASON,
)
from flexi_scheduler.domain.scheduling.value_objects import (
    Department,
    MachineStatus,
    MachineType,
    WorkCenter,
)

checker = CompatibilityChecker()


def build_machine(**overrides) -> Machine:
    data = {
        "id": "M1",
        "machine_name": "Flexo 1",
        "machine_type": MachineType.FLEXO_PRINT,
        "work_center": WorkCenter.ZANICA,
        "department": Department.PRINTING,
        "max_web_width": 500,
        "changeover_color": 0.5,
    }
    data.update(overrides)
    return Machine.create(**data)


def build_order(**overrides) -> ProductionOrder:
    data = {
        "id": "O1",
        "odp_number": "OP000001",
        "bag_width": 400,
        "bag_height": 300,
        "bag_step": 100,
        "department": Department.PRINTING,
        "quantity": 1000,
        "duration": 2,
    }
    data.update(overrides)
    return ProductionOrder.create(**data)


class TestCompatibilityChecker:
    """Test CompatibilityChecker.check."""

    def test_compatible_pair(self, m1, o1):
        result = checker.check(m1, o1)
        assert result.compatible
        assert result.reasons == []
        assert bool(result)

    def test_width_exceeded_gives_exactly_one_reason(self, m1, order_factory):
        order = order_factory(bag_width=600)
        result = checker.check(m1, order)
        assert not result.compatible
        assert result.reasons == [
            "Bag width (600mm) exceeds machine capacity (500mm)"
        ]

    def test_height_exceeded(self, m1, order_factory):
        result = checker.check(m1, order_factory(bag_height=450))
        assert result.reasons == [
            "Bag height (450mm) exceeds machine capacity (400mm)"
        ]

    def test_department_mismatch(self, m1, order_factory):
        result = checker.check(m1, order_factory(department=Department.PACKAGING))
        assert result.reasons == ["Department mismatch: PRINTING vs PACKAGING"]

    def test_inactive_machine(self, m1, o1):
        result = checker.check(m1.change_status(MachineStatus.MAINTENANCE), o1)
        assert result.reasons == ["Machine is not active (status: MAINTENANCE)"]

    def test_all_violations_reported(self, m1, order_factory):
        order = order_factory(
            department=Department.PACKAGING, bag_width=800, bag_height=900
        )
        result = checker.check(m1.change_status(MachineStatus.INACTIVE), order)
        assert not result.compatible
        assert len(result.reasons) == 4

    def test_unset_capacity_is_not_enforced(self, machine_factory, order_factory):
        machine = machine_factory(max_web_width=None, max_bag_height=None)
        assert checker.check(machine, order_factory(bag_width=5000, bag_height=5000))

    def test_missing_data(self, m1, o1):
        assert checker.check(None, o1).reasons == [MISSING_DATA_REASON]
        assert checker.check(m1, None).reasons == [MISSING_DATA_REASON]
        assert not checker.check(None, None).compatible

    def test_compatible_machines(self, machine_factory, o1):
        wide = machine_factory(id="M1", machine_name="Wide")
        narrow = machine_factory(id="M2", machine_name="Narrow", max_web_width=300)
        assert checker.compatible_machines([wide, narrow], o1) == [wide]


class TestCompatibilityProperties:
    """Property-based checks on the compatibility rules."""

    @given(
        width=st.floats(min_value=1, max_value=2000, allow_nan=False),
        height=st.floats(min_value=1, max_value=2000, allow_nan=False),
        status=st.sampled_from(list(MachineStatus)),
        department=st.sampled_from(list(Department)),
    )
    def test_check_is_deterministic(self, width, height, status, department):
        machine = build_machine(max_bag_height=800, status=status)
        order = build_order(
            bag_width=width, bag_height=height, bag_step=1, department=department
        )
        first = checker.check(machine, order)
        second = checker.check(machine, order)
        assert first == second
        assert set(first.reasons) == set(second.reasons)

    @given(
        max_width=st.integers(min_value=1, max_value=1000),
        width=st.integers(min_value=1, max_value=2000),
    )
    def test_no_false_negative_on_width(self, max_width, width):
        machine = build_machine(max_web_width=max_width)
        order = build_order(bag_width=width, bag_step=1)
        result = checker.check(machine, order)
        width_reason = any(r.startswith("Bag width") for r in result.reasons)
        assert width_reason == (width > max_width)
        if width > max_width:
            assert not result.compatible

    @given(
        max_height=st.integers(min_value=1, max_value=1000),
        height=st.integers(min_value=1, max_value=2000),
    )
    def test_no_false_negative_on_height(self, max_height, height):
        machine = build_machine(max_bag_height=max_height)
        order = build_order(bag_height=height)
        result = checker.check(machine, order)
        height_reason = any(r.startswith("Bag height") for r in result.reasons)
        assert height_reason == (height > max_height)
