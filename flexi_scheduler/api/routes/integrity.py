"""Integrity check API Routes."""

from typing import Any

from fastapi import APIRouter

from flexi_scheduler.api.deps import IntegrityMonitorDep

router = APIRouter(prefix="/integrity", tags=["integrity"])


@router.get("")
async def check_integrity(monitor: IntegrityMonitorDep) -> dict[str, Any]:
    """Report orphaned scheduling references without changing anything."""
    outcome = await monitor.run_check(auto_cleanup=False)
    return outcome.to_dict()


@router.post("/cleanup")
async def cleanup_integrity(monitor: IntegrityMonitorDep) -> dict[str, Any]:
    """Unschedule every order left referencing a missing machine."""
    outcome = await monitor.run_check(auto_cleanup=True)
    return outcome.to_dict()
