"""
Integrity monitoring.

Runs the orphan scan on load, on demand and periodically in the background,
announces the counts for the banner, and cleans up only when asked to.
"""

import asyncio
import contextlib
from collections.abc import Iterable
from dataclasses import dataclass, field

from flexi_scheduler.core.config import settings
from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.scheduling.entities import ProductionOrder, ScheduledEvent
from flexi_scheduler.domain.scheduling.events import EventPublisher, IntegrityChecked
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway
from flexi_scheduler.domain.scheduling.services import (
    IntegrityValidator,
    OrphanReport,
)
from flexi_scheduler.domain.shared.exceptions import (
    CleanupInterruptedError,
    DomainError,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class IntegrityCheckOutcome:
    """What one integrity check found and, if enabled, cleaned."""

    report: OrphanReport
    catalog_issues: list[str] = field(default_factory=list)
    cleared_order_ids: list[str] = field(default_factory=list)

    @property
    def cleaned(self) -> bool:
        return bool(self.cleared_order_ids)

    def to_dict(self) -> dict:
        data = self.report.to_dict()
        data["catalog_issues"] = list(self.catalog_issues)
        data["cleared_order_ids"] = list(self.cleared_order_ids)
        return data


class IntegrityMonitor:
    """Application service wrapping the integrity validator."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        validator: IntegrityValidator | None = None,
        publisher: EventPublisher | None = None,
        interval_seconds: float | None = None,
        auto_cleanup: bool | None = None,
    ) -> None:
        self._gateway = gateway
        self._validator = validator or IntegrityValidator()
        self._publisher = publisher
        self._interval = (
            settings.INTEGRITY_CHECK_INTERVAL_SECONDS
            if interval_seconds is None
            else interval_seconds
        )
        self._auto_cleanup = (
            settings.INTEGRITY_AUTO_CLEANUP if auto_cleanup is None else auto_cleanup
        )
        self._task: asyncio.Task | None = None
        self.last_outcome: IntegrityCheckOutcome | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_check(
        self,
        auto_cleanup: bool | None = None,
        legacy_events: Iterable[ScheduledEvent] = (),
    ) -> IntegrityCheckOutcome:
        """
        Scan the catalogs for orphaned scheduling references.

        Args:
            auto_cleanup: Clear orphaned orders' scheduling fields; defaults to
                the configured policy
            legacy_events: Events kept outside the order catalog, checked
                alongside the ones derived from scheduled orders

        Returns:
            IntegrityCheckOutcome with the report and any cleared orders
        """
        cleanup = self._auto_cleanup if auto_cleanup is None else auto_cleanup
        machines = await self._gateway.list_machines()
        orders = await self._gateway.list_orders()
        events = [ScheduledEvent.from_order(o) for o in orders if o.is_scheduled]
        events.extend(legacy_events)

        report = self._validator.detect_orphans(machines, orders, events)
        issues = self._validator.validate_catalogs(machines, orders)
        cleared: list[str] = []
        if cleanup and report.has_orphans:
            cleared = await self._clear_orders(
                self._validator.orders_to_clear(report, orders)
            )

        outcome = IntegrityCheckOutcome(
            report=report, catalog_issues=issues, cleared_order_ids=cleared
        )
        self.last_outcome = outcome
        logger.info(
            "integrity_checked",
            orphan_event_count=report.orphan_event_count,
            orphan_machine_count=report.orphan_machine_count,
            catalog_issues=len(issues),
            cleared=len(cleared),
        )
        if self._publisher is not None:
            await self._publisher.publish_async(
                IntegrityChecked(
                    orphan_event_count=report.orphan_event_count,
                    orphan_machine_count=report.orphan_machine_count,
                    cleaned=outcome.cleaned,
                )
            )
        return outcome

    def start(self) -> None:
        """Start the periodic background check on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_periodically())
        logger.info("integrity_monitor_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("integrity_monitor_stopped")

    async def _clear_orders(self, orders: Iterable[ProductionOrder]) -> list[str]:
        cleared: list[str] = []
        for order in orders:
            try:
                await self._gateway.update_order(
                    order.id, ProductionOrder.cleared_fields()
                )
            except Exception as e:
                logger.error(
                    "integrity_cleanup_interrupted",
                    failed_order_id=order.id,
                    cleared_order_ids=cleared,
                    error=str(e),
                )
                raise CleanupInterruptedError(order.id, cleared, e) from e
            cleared.append(order.id)
        if cleared:
            logger.info("orphaned_orders_cleared", cleared_order_ids=cleared)
        return cleared

    async def _run_periodically(self) -> None:
        while True:
            try:
                await self.run_check()
            except DomainError as e:
                logger.error("integrity_check_failed", error=e.to_dict())
            except Exception:
                logger.exception("integrity_check_crashed")
            await asyncio.sleep(self._interval)
