from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, constr, field_serializer

from app.models.appointment import AppointmentStatus


class BookSlotIn(BaseModel):
    professional_id: int = Field(..., ge=1)
    patient_id: int = Field(..., ge=1)
    date: dt.date
    start_time: constr(pattern=r"^\d{2}:\d{2}$") = Field(  # type: ignore
        ..., description="Hora local HH:MM del bloque elegido"
    )
    duration_minutes: int | None = Field(None, ge=1, le=240)


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    professional_id: int
    patient_id: int
    scheduled_at: dt.datetime
    ends_at: dt.datetime
    duration_minutes: int
    status: AppointmentStatus

    @field_serializer("scheduled_at", "ends_at")
    def _utc(self, v: dt.datetime) -> str:
        return v.isoformat().replace("+00:00", "Z")


class ConfirmationOut(BaseModel):
    appointment_id: int
    allowed: bool
    reason: str
    hours_until: float
    message: str


class JoinOut(BaseModel):
    appointment_id: int
    allowed: bool
    phase: str
    message: str
    opens_at: dt.datetime
    closes_at: dt.datetime

    @field_serializer("opens_at", "closes_at")
    def _utc(self, v: dt.datetime) -> str:
        return v.isoformat().replace("+00:00", "Z")


class CompleteElapsedOut(BaseModel):
    completed: list[int]
