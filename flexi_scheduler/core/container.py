"""
Service wiring.

Builds the gateway, event bus and services once and hands them out through
a single container, instead of reaching for module-level singletons.
"""

from flexi_scheduler.application.scheduling import SchedulingCommandDispatcher
from flexi_scheduler.application.services import (
    IntegrityMonitor,
    OffTimeService,
    OrderCatalogService,
)
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway
from flexi_scheduler.domain.scheduling.services import DEFAULT_VIEW, SchedulerEngine
from flexi_scheduler.infrastructure.cache import CachedPersistenceGateway
from flexi_scheduler.infrastructure.events import InMemoryEventBus
from flexi_scheduler.infrastructure.persistence import (
    InMemoryPersistenceGateway,
    SqlPersistenceGateway,
)

from .config import Settings, settings


def build_gateway(config: Settings = settings) -> PersistenceGateway:
    """Create the configured backend, behind the read cache when enabled."""
    gateway: PersistenceGateway
    if config.PERSISTENCE_BACKEND == "sql":
        gateway = SqlPersistenceGateway.from_url(
            config.DATABASE_URL, echo=config.LOG_SQL
        )
    else:
        gateway = InMemoryPersistenceGateway()
    if config.read_cache_enabled:
        gateway = CachedPersistenceGateway(
            gateway, ttl_seconds=config.READ_CACHE_TTL_SECONDS
        )
    return gateway


class ServiceContainer:
    """Holds one instance of every service for an application."""

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        event_bus: InMemoryEventBus | None = None,
        config: Settings = settings,
    ) -> None:
        self.config = config
        self.gateway = gateway or build_gateway(config)
        self.event_bus = event_bus or InMemoryEventBus()
        self.engine = SchedulerEngine(self.gateway, publisher=self.event_bus)
        self._dispatchers: dict[str, SchedulingCommandDispatcher] = {}
        self.integrity_monitor = IntegrityMonitor(
            self.gateway,
            publisher=self.event_bus,
            interval_seconds=config.INTEGRITY_CHECK_INTERVAL_SECONDS,
            auto_cleanup=config.INTEGRITY_AUTO_CLEANUP,
        )
        self.off_time = OffTimeService(self.gateway)
        self.order_catalog = OrderCatalogService(self.gateway)

    def dispatcher_for(
        self, view_id: str = DEFAULT_VIEW
    ) -> SchedulingCommandDispatcher:
        """Dispatcher of one client view; created on first use, then reused."""
        dispatcher = self._dispatchers.get(view_id)
        if dispatcher is None:
            dispatcher = SchedulingCommandDispatcher(self.engine, view_id=view_id)
            self._dispatchers[view_id] = dispatcher
        return dispatcher
