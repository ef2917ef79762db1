from __future__ import annotations

from fastapi import APIRouter, Depends

from app.deps import get_scheduling_service
from app.schemas.professionals import ProfessionalOut, RenewalStatusOut
from app.services.scheduling_service import SchedulingService

router = APIRouter(prefix="/professionals", tags=["plans"])


@router.get("/{professional_id}/plan/renewal", response_model=RenewalStatusOut)
def renewal_status(
    professional_id: int, svc: SchedulingService = Depends(get_scheduling_service)
):
    d = svc.renewal_status(professional_id)
    return RenewalStatusOut(
        professional_id=professional_id,
        can_renew=d.can_renew,
        days_until_expiry=d.days_until_expiry,
        days_until_renewal=d.days_until_renewal,
        message=d.message,
    )


@router.post("/{professional_id}/plan/renewal", response_model=ProfessionalOut)
def renew_plan(
    professional_id: int, svc: SchedulingService = Depends(get_scheduling_service)
):
    """Extends the monthly plan. 400 (renewal_not_open) when still too early."""
    return ProfessionalOut.model_validate(svc.renew_plan(professional_id))
