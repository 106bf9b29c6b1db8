"""
Compatibility Checker

Decides whether a machine may host a production order. Every rule is
evaluated independently so the caller sees all the reasons a placement is
rejected, not just the first one.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from ...shared.base import DomainService
from ..entities.machine import Machine
from ..entities.production_order import ProductionOrder
from ..value_objects.enums import MachineStatus

MISSING_DATA_REASON = "Machine or order data is missing"


@dataclass(frozen=True)
class CompatibilityResult:
    """Outcome of a compatibility check."""

    compatible: bool
    reasons: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.compatible


def _mm(value: float) -> str:
    return f"{value:g}mm"


def _department_rule(machine: Machine, order: ProductionOrder) -> str | None:
    if machine.department != order.department:
        return (
            f"Department mismatch: {machine.department.value} "
            f"vs {order.department.value}"
        )
    return None


def _width_rule(machine: Machine, order: ProductionOrder) -> str | None:
    if machine.max_web_width is not None and order.bag_width > machine.max_web_width:
        return (
            f"Bag width ({_mm(order.bag_width)}) exceeds machine capacity "
            f"({_mm(machine.max_web_width)})"
        )
    return None


def _height_rule(machine: Machine, order: ProductionOrder) -> str | None:
    if (
        machine.max_bag_height is not None
        and order.bag_height > machine.max_bag_height
    ):
        return (
            f"Bag height ({_mm(order.bag_height)}) exceeds machine capacity "
            f"({_mm(machine.max_bag_height)})"
        )
    return None


def _status_rule(machine: Machine, order: ProductionOrder) -> str | None:
    if machine.status != MachineStatus.ACTIVE:
        return f"Machine is not active (status: {machine.status.value})"
    return None


Rule = Callable[[Machine, ProductionOrder], str | None]

DEFAULT_RULES: tuple[Rule, ...] = (
    _department_rule,
    _width_rule,
    _height_rule,
    _status_rule,
)


class CompatibilityChecker(DomainService):
    """Pure machine/order compatibility rules."""

    def __init__(self, rules: tuple[Rule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def check(
        self, machine: Machine | None, order: ProductionOrder | None
    ) -> CompatibilityResult:
        """
        Check whether ``machine`` can host ``order``.

        Args:
            machine: Candidate machine, or None when it could not be resolved
            order: Order to place, or None when it could not be resolved

        Returns:
            CompatibilityResult listing every violated rule
        """
        if machine is None or order is None:
            return CompatibilityResult(False, [MISSING_DATA_REASON])

        reasons = [
            reason for rule in self._rules if (reason := rule(machine, order))
        ]
        return CompatibilityResult(not reasons, reasons)

    def compatible_machines(
        self, machines: list[Machine], order: ProductionOrder
    ) -> list[Machine]:
        """Get the machines that pass every rule for ``order``."""
        return [m for m in machines if self.check(m, order).compatible]
