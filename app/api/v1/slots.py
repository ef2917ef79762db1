from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.deps import get_scheduling_service
from app.scheduling.overlap import local_slot_to_utc
from app.schemas.slots import AvailableDatesOut, SlotOut, SlotsOut
from app.services.scheduling_service import SchedulingService
from app.utils.tz import iso_utc

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/dates", response_model=AvailableDatesOut)
def get_available_dates(
    professional_id: int = Query(..., ge=1),
    svc: SchedulingService = Depends(get_scheduling_service),
):
    """Dates within the booking horizon that still have a free slot."""
    dates = svc.resolve_available_dates(professional_id)
    return AvailableDatesOut(
        professional_id=professional_id, tz=svc.policies.tz.key, dates=dates
    )


@router.get("", response_model=SlotsOut)
def get_slots(
    professional_id: int = Query(..., ge=1),
    date_local: date = Query(..., alias="date"),  # clinic-local date
    include_unavailable: bool = Query(False),
    svc: SchedulingService = Depends(get_scheduling_service),
):
    """
    Bookable slots of `professional_id` on `date`, in start order.
    Dates outside the horizon return an empty list.
    """
    if include_unavailable:
        slots = svc.resolve_slots(professional_id, date_local)
    else:
        slots = svc.resolve_available_slots(professional_id, date_local)

    tz = svc.policies.tz
    out: list[SlotOut] = []
    for s in slots:
        start_utc, end_utc = local_slot_to_utc(s, tz)
        out.append(
            SlotOut(
                date=s.date,
                start_time=str(s.start_time),
                end_time="24:00" if s.end_time.minutes == 1440 else str(s.end_time),
                starts_at=iso_utc(start_utc),
                ends_at=iso_utc(end_utc),
                available=s.available,
            )
        )
    return SlotsOut(professional_id=professional_id, date=date_local, tz=tz.key, slots=out)
