from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class SlotOut(BaseModel):
    date: dt.date
    start_time: str  # local HH:MM
    end_time: str
    starts_at: str  # UTC ISO-8601
    ends_at: str
    available: bool


class SlotsOut(BaseModel):
    professional_id: int
    date: dt.date
    tz: str
    slots: list[SlotOut]


class AvailableDatesOut(BaseModel):
    professional_id: int
    tz: str
    dates: list[dt.date]
