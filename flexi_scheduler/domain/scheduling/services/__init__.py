"""
Domain Services

Business logic of the scheduling core that does not belong to a single
entity: compatibility rules, availability, the schedule projection, the
scheduler state machine and catalog integrity checks.
"""

from .availability_index import AvailabilityIndex
from .compatibility import CompatibilityChecker, CompatibilityResult
from .deletion_guard import OrderDeletionGuard
from .integrity_validator import CleanupResult, IntegrityValidator, OrphanReport
from .schedule_store import ScheduleStore
from .scheduler_engine import DEFAULT_VIEW, SchedulerEngine

__all__ = [
    "DEFAULT_VIEW",
    "AvailabilityIndex",
    "CleanupResult",
    "CompatibilityChecker",
    "CompatibilityResult",
    "IntegrityValidator",
    "OrderDeletionGuard",
    "OrphanReport",
    "ScheduleStore",
    "SchedulerEngine",
]
