from collections.abc import Callable

import pytest

from flexi_scheduler.domain.scheduling.entities import Machine, ProductionOrder
from flexi_scheduler.domain.scheduling.services import SchedulerEngine
from flexi_scheduler.domain.scheduling.value_objects import (
    Department,
    MachineType,
    WorkCenter,
)
from flexi_scheduler.infrastructure.events import InMemoryEventBus
from flexi_scheduler.infrastructure.persistence import InMemoryPersistenceGateway


@pytest.fixture
def machine_factory() -> Callable[..., Machine]:
    def make(**overrides) -> Machine:
        data = {
            "id": "M1",
            "machine_name": "Flexo 1",
            "machine_type": MachineType.FLEXO_PRINT,
            "work_center": WorkCenter.ZANICA,
            "department": Department.PRINTING,
            "max_web_width": 500,
            "max_bag_height": 400,
            "standard_speed": 120,
            "changeover_color": 0.5,
        }
        data.update(overrides)
        return Machine.create(**data)

    return make


@pytest.fixture
def order_factory() -> Callable[..., ProductionOrder]:
    counter = iter(range(1, 10_000))

    def make(**overrides) -> ProductionOrder:
        n = next(counter)
        data = {
            "id": f"O{n}",
            "odp_number": f"OP{n:06d}",
            "bag_width": 400,
            "bag_height": 300,
            "bag_step": 200,
            "department": Department.PRINTING,
            "quantity": 1000,
            "duration": 2,
        }
        data.update(overrides)
        return ProductionOrder.create(**data)

    return make


@pytest.fixture
def m1(machine_factory) -> Machine:
    """PRINTING machine, max web width 500, ACTIVE."""
    return machine_factory()


@pytest.fixture
def o1(order_factory) -> ProductionOrder:
    """PRINTING order, bag width 400, two hours long."""
    return order_factory(id="O1", odp_number="OP000001")


@pytest.fixture
def o2(order_factory) -> ProductionOrder:
    return order_factory(id="O2", odp_number="OP000002")


@pytest.fixture
def gateway(m1, o1, o2) -> InMemoryPersistenceGateway:
    return InMemoryPersistenceGateway(machines=[m1], orders=[o1, o2])


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def engine(gateway, event_bus) -> SchedulerEngine:
    return SchedulerEngine(gateway, publisher=event_bus)
