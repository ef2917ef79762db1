from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.deps import get_scheduling_service
from app.schemas.appointments import (
    AppointmentOut,
    BookSlotIn,
    CompleteElapsedOut,
    ConfirmationOut,
    JoinOut,
)
from app.schemas.surveys import SurveyIn, SurveyOut, SurveyStatusOut
from app.services.scheduling_service import SchedulingService

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
def book_slot(
    payload: BookSlotIn,
    svc: SchedulingService = Depends(get_scheduling_service),
):
    """Books a slot previously offered by GET /slots. 409 if it was taken meanwhile."""
    ap = svc.book_slot(
        professional_id=payload.professional_id,
        patient_id=payload.patient_id,
        for_date=payload.date,
        start=payload.start_time,
        duration_minutes=payload.duration_minutes,
    )
    return AppointmentOut.model_validate(ap)


@router.post("/complete-elapsed", response_model=CompleteElapsedOut)
def complete_elapsed(svc: SchedulingService = Depends(get_scheduling_service)):
    return CompleteElapsedOut(completed=svc.complete_elapsed())


@router.get("/{appointment_id}/confirmation", response_model=ConfirmationOut)
def confirmation_status(
    appointment_id: int, svc: SchedulingService = Depends(get_scheduling_service)
):
    d = svc.confirmation_status(appointment_id)
    return ConfirmationOut(
        appointment_id=appointment_id,
        allowed=d.allowed,
        reason=d.reason.value,
        hours_until=round(d.hours_until, 2),
        message=d.message,
    )


@router.post("/{appointment_id}/confirm", response_model=AppointmentOut)
def confirm(appointment_id: int, svc: SchedulingService = Depends(get_scheduling_service)):
    return AppointmentOut.model_validate(svc.confirm_appointment(appointment_id))


@router.post("/{appointment_id}/cancel", response_model=AppointmentOut)
def cancel(appointment_id: int, svc: SchedulingService = Depends(get_scheduling_service)):
    return AppointmentOut.model_validate(svc.cancel_appointment(appointment_id))


@router.post("/{appointment_id}/complete", response_model=AppointmentOut)
def complete(appointment_id: int, svc: SchedulingService = Depends(get_scheduling_service)):
    return AppointmentOut.model_validate(svc.complete_appointment(appointment_id))


@router.get("/{appointment_id}/join", response_model=JoinOut)
def join_status(appointment_id: int, svc: SchedulingService = Depends(get_scheduling_service)):
    js = svc.join_status(appointment_id)
    return JoinOut(
        appointment_id=appointment_id,
        allowed=js.allowed,
        phase=js.phase.value,
        message=js.message,
        opens_at=js.opens_at,
        closes_at=js.closes_at,
    )


@router.get("/{appointment_id}/survey", response_model=SurveyStatusOut)
def survey_status(appointment_id: int, svc: SchedulingService = Depends(get_scheduling_service)):
    st = svc.survey_status(appointment_id)
    return SurveyStatusOut(
        appointment_id=appointment_id,
        can_rate=st.can_rate,
        has_rated=st.has_rated,
        days_since=st.days_since,
        hours_since=st.hours_since,
        is_within_72_hours=st.is_within_72_hours,
        is_within_7_days=st.is_within_7_days,
    )


@router.post(
    "/{appointment_id}/survey",
    response_model=SurveyOut,
    status_code=status.HTTP_201_CREATED,
)
def record_survey(
    appointment_id: int,
    payload: SurveyIn,
    svc: SchedulingService = Depends(get_scheduling_service),
):
    s = svc.record_survey(
        appointment_id,
        payload.patient_id,
        payload.ratings(),
        what_you_valued=payload.what_you_valued,
        what_to_improve=payload.what_to_improve,
    )
    return SurveyOut(
        id=s.id,
        appointment_id=s.appointment_id,
        patient_id=s.patient_id,
        professional_id=s.professional_id,
    )
