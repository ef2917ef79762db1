from __future__ import annotations

from pydantic import BaseModel, Field, constr

from app.models.satisfaction_survey import RATING_FIELDS


class SurveyIn(BaseModel):
    patient_id: int = Field(..., ge=1)
    professional_empathy_rating: int = Field(..., ge=1, le=5)
    professional_punctuality_rating: int = Field(..., ge=1, le=5)
    professional_satisfaction_rating: int = Field(..., ge=1, le=5)
    platform_booking_rating: int = Field(..., ge=1, le=5)
    platform_payment_rating: int = Field(..., ge=1, le=5)
    platform_experience_rating: int = Field(..., ge=1, le=5)
    what_you_valued: constr(max_length=1000) | None = None  # type: ignore
    what_to_improve: constr(max_length=1000) | None = None  # type: ignore

    def ratings(self) -> dict[str, int]:
        return {f: getattr(self, f) for f in RATING_FIELDS}


class SurveyStatusOut(BaseModel):
    appointment_id: int
    can_rate: bool
    has_rated: bool
    days_since: int
    hours_since: int
    is_within_72_hours: bool
    is_within_7_days: bool


class SurveyOut(BaseModel):
    id: int
    appointment_id: int
    patient_id: int
    professional_id: int
