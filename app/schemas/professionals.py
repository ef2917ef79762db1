from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_serializer


class ProfessionalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    speciality: str | None = None
    is_active: bool
    plan_expires_at: datetime | None = None

    @field_serializer("plan_expires_at")
    def _utc(self, v: datetime | None) -> str | None:
        return v.isoformat().replace("+00:00", "Z") if v else None


class RenewalStatusOut(BaseModel):
    professional_id: int
    can_renew: bool
    days_until_expiry: int | None
    days_until_renewal: int | None
    message: str
