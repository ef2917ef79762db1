from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, constr, field_serializer

TimeStr = constr(pattern=r"^\d{2}:\d{2}$")  # "HH:MM"


class WeeklyRuleIn(BaseModel):
    professional_id: int = Field(..., ge=1)
    weekday: int = Field(..., ge=0, le=6, description="0=domingo ... 6=sábado")
    start: TimeStr  # type: ignore # local HH:MM (America/Santiago)
    end: TimeStr  # type: ignore # "00:00" = fin del día


class WeeklyRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    professional_id: int
    weekday: int
    start_time: str
    end_time: str

    @classmethod
    def from_row(cls, row) -> WeeklyRuleOut:
        return cls(
            id=row.id,
            professional_id=row.professional_id,
            weekday=row.weekday,
            start_time=row.start_time.strftime("%H:%M"),
            end_time=row.end_time.strftime("%H:%M"),
        )


class DateOverrideIn(BaseModel):
    professional_id: int = Field(..., ge=1)
    for_date: date
    start: TimeStr  # type: ignore
    end: TimeStr  # type: ignore
    is_available: bool = True


class DateOverrideOut(BaseModel):
    id: int
    professional_id: int
    for_date: date
    start_time: str
    end_time: str
    is_available: bool

    @classmethod
    def from_row(cls, row) -> DateOverrideOut:
        return cls(
            id=row.id,
            professional_id=row.professional_id,
            for_date=row.for_date,
            start_time=row.start_time.strftime("%H:%M"),
            end_time=row.end_time.strftime("%H:%M"),
            is_available=row.is_available,
        )


class BlockIn(BaseModel):
    professional_id: int = Field(..., ge=1)
    starts_at: datetime = Field(..., description="ISO-8601 con zona horaria")
    ends_at: datetime
    reason: constr(max_length=200) | None = None  # type: ignore


class BlockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    professional_id: int
    starts_at: datetime
    ends_at: datetime
    reason: str | None = None

    @field_serializer("starts_at", "ends_at")
    def _utc(self, v: datetime) -> str:
        return v.isoformat().replace("+00:00", "Z")
