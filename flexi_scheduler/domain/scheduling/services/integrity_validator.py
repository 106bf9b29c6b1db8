"""
Integrity Validator

Cross-checks the machine catalog, the order catalog and the scheduled events
for dangling references. Detection is read-only; cleanup is a separate,
explicit step so callers choose between warning and remediating.
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from ...shared.base import DomainService, utcnow
from ..entities.machine import Machine
from ..entities.production_order import ProductionOrder
from ..entities.scheduled_event import ScheduledEvent
from .compatibility import CompatibilityChecker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrphanReport:
    """Result of an orphan scan."""

    orphan_order_events: list[ScheduledEvent] = field(default_factory=list)
    orphan_machine_events: list[ScheduledEvent] = field(default_factory=list)
    # Machine references used by events but absent from the machine catalog
    missing_machine_keys: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    checked_at: datetime = field(default_factory=utcnow)

    @property
    def orphan_event_count(self) -> int:
        ids = {e.id for e in self.orphan_order_events}
        ids.update(e.id for e in self.orphan_machine_events)
        return len(ids)

    @property
    def orphan_machine_count(self) -> int:
        return len(self.missing_machine_keys)

    @property
    def has_orphans(self) -> bool:
        return self.orphan_event_count > 0

    def orphan_event_ids(self) -> set[str]:
        return {e.id for e in (*self.orphan_order_events, *self.orphan_machine_events)}

    def to_dict(self) -> dict:
        return {
            "orphan_event_count": self.orphan_event_count,
            "orphan_machine_count": self.orphan_machine_count,
            "orphan_order_events": [e.id for e in self.orphan_order_events],
            "orphan_machine_events": [e.id for e in self.orphan_machine_events],
            "missing_machine_keys": list(self.missing_machine_keys),
            "recommendations": list(self.recommendations),
            "checked_at": self.checked_at.isoformat(),
        }


@dataclass(frozen=True)
class CleanupResult:
    """Events kept after cleanup, with counts removed per orphan category."""

    retained_events: list[ScheduledEvent]
    removed_order_refs: int
    removed_machine_refs: int

    @property
    def removed_total(self) -> int:
        return self.removed_order_refs + self.removed_machine_refs


class IntegrityValidator(DomainService):
    """Detects and cleans scheduling references to missing machines or orders."""

    def __init__(self, checker: CompatibilityChecker | None = None) -> None:
        self._checker = checker or CompatibilityChecker()

    def detect_orphans(
        self,
        machines: Iterable[Machine],
        orders: Iterable[ProductionOrder],
        events: Iterable[ScheduledEvent],
    ) -> OrphanReport:
        """
        Flag every event whose order or machine is missing from the catalogs.

        A machine reference is valid when it matches a machine ID or display
        key. An event can be flagged under both categories.
        """
        valid_machine_keys: set[str] = set()
        for machine in machines:
            valid_machine_keys.add(machine.id)
            valid_machine_keys.add(machine.display_key)
        valid_order_ids = {order.id for order in orders}

        orphan_order_events = []
        orphan_machine_events = []
        missing_keys: set[str] = set()
        for event in events:
            if event.order_id not in valid_order_ids:
                orphan_order_events.append(event)
            references = {event.machine_id, event.machine_reference}
            if valid_machine_keys.isdisjoint(references):
                orphan_machine_events.append(event)
                missing_keys.add(event.machine_reference)

        report = OrphanReport(
            orphan_order_events=orphan_order_events,
            orphan_machine_events=orphan_machine_events,
            missing_machine_keys=sorted(missing_keys),
            recommendations=self._recommendations(
                orphan_order_events, orphan_machine_events, missing_keys
            ),
        )
        if report.has_orphans:
            logger.warning(
                "Found %d orphaned events (%d missing orders, %d missing machines)",
                report.orphan_event_count,
                len(orphan_order_events),
                report.orphan_machine_count,
            )
        else:
            logger.debug("No orphaned events found")
        return report

    def cleanup(
        self, events: Iterable[ScheduledEvent], report: OrphanReport
    ) -> CleanupResult:
        """Drop every event listed in either orphan category of ``report``."""
        orphan_ids = report.orphan_event_ids()
        retained = [event for event in events if event.id not in orphan_ids]
        result = CleanupResult(
            retained_events=retained,
            removed_order_refs=len(report.orphan_order_events),
            removed_machine_refs=len(report.orphan_machine_events),
        )
        logger.info(
            "Removed %d orphaned event references, %d events retained",
            result.removed_total,
            len(retained),
        )
        return result

    def orders_to_clear(
        self, report: OrphanReport, orders: Iterable[ProductionOrder]
    ) -> list[ProductionOrder]:
        """
        Still-present scheduled orders referenced by an orphaned event.

        Clearing their scheduling fields is the same as forcing an unschedule.
        """
        referenced = {
            e.order_id
            for e in (*report.orphan_order_events, *report.orphan_machine_events)
        }
        return [o for o in orders if o.id in referenced and o.is_scheduled]

    def validate_catalogs(
        self, machines: Iterable[Machine], orders: Iterable[ProductionOrder]
    ) -> list[str]:
        """
        Report consistency problems that are not dangling references.

        Covers duplicate order numbers, overlapping orders on one machine and
        scheduled orders whose machine can no longer host them.
        """
        machines_by_key: dict[str, Machine] = {}
        for machine in machines:
            machines_by_key[machine.id] = machine
            machines_by_key[machine.display_key] = machine
        orders = list(orders)
        issues = []

        counts = Counter(order.odp_number for order in orders)
        for odp_number, count in sorted(counts.items()):
            if count > 1:
                issues.append(f"Duplicate order number {odp_number} ({count} orders)")

        by_machine: dict[str, list[ScheduledEvent]] = defaultdict(list)
        for order in orders:
            if not order.is_scheduled:
                continue
            event = ScheduledEvent.from_order(order)
            machine = machines_by_key.get(event.machine_id)
            if machine is not None:
                result = self._checker.check(machine, order)
                if not result.compatible:
                    issues.append(
                        f"Order {order.odp_number} is scheduled on incompatible "
                        f"machine {machine.machine_name}: {'; '.join(result.reasons)}"
                    )
                by_machine[machine.id].append(event)

        for machine_id, events in by_machine.items():
            events.sort(key=lambda e: e.start_time)
            for i, first in enumerate(events):
                for second in events[i + 1:]:
                    if second.start_time >= first.end_time:
                        break
                    issues.append(
                        f"Orders {first.title} and {second.title} overlap on "
                        f"machine {machines_by_key[machine_id].machine_name}"
                    )

        if issues:
            logger.warning("Catalog validation found %d issues", len(issues))
        return issues

    @staticmethod
    def _recommendations(
        orphan_order_events: list[ScheduledEvent],
        orphan_machine_events: list[ScheduledEvent],
        missing_keys: set[str],
    ) -> list[str]:
        recommendations = []
        if orphan_order_events:
            recommendations.append(
                f"Remove {len(orphan_order_events)} scheduled events whose orders "
                "no longer exist"
            )
        if orphan_machine_events:
            recommendations.append(
                f"Unschedule {len(orphan_machine_events)} orders placed on missing "
                f"machines: {', '.join(sorted(missing_keys))}"
            )
        if recommendations:
            recommendations.append(
                "Run the integrity cleanup to restore catalog consistency"
            )
        return recommendations
