"""Application services."""

from .integrity_monitor import IntegrityCheckOutcome, IntegrityMonitor
from .off_time_service import OffTimeService
from .order_catalog_service import OrderCatalogService

__all__ = [
    "IntegrityCheckOutcome",
    "IntegrityMonitor",
    "OffTimeService",
    "OrderCatalogService",
]
