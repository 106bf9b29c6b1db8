"""Machine availability API Routes."""

import datetime as dt

from fastapi import APIRouter
from pydantic import BaseModel, Field

from flexi_scheduler.api.deps import OffTimeServiceDep

router = APIRouter(prefix="/availability", tags=["availability"])


class OffTimeRequest(BaseModel):
    """Request for marking machine hours unavailable over a date range."""

    machine_id: str = Field(..., min_length=1)
    start_date: dt.date
    end_date: dt.date
    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=1, le=24)


class AvailabilityResponse(BaseModel):
    machine_id: str
    date: dt.date
    unavailable_hours: list[int]


@router.post("/off-time", response_model=list[AvailabilityResponse])
async def set_off_time(request: OffTimeRequest, service: OffTimeServiceDep):
    """Mark ``[start_hour, end_hour)`` unavailable on every date of the range."""
    records = await service.set_off_time(
        request.machine_id,
        request.start_date,
        request.end_date,
        request.start_hour,
        request.end_hour,
    )
    return [
        AvailabilityResponse(
            machine_id=r.machine_id, date=r.date, unavailable_hours=r.sorted_hours()
        )
        for r in records
    ]
