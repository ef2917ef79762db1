"""
Wall-clock primitives for the clinic calendar.

Rules, overrides and candidate slots live in local time of day
(`LocalTime`); blocked intervals and appointments are absolute instants
(aware `datetime` in UTC). The two never get compared directly: see
`app.scheduling.overlap.local_slot_to_utc`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, time

from app.core.errors import InvalidInputError

MINUTES_PER_DAY = 1440

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True, order=True)
class LocalTime:
    """Minutes since local midnight, 0..1440 (1440 = end of day)."""

    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes <= MINUTES_PER_DAY:
            raise InvalidInputError(f"Hora fuera del día: {self.minutes} min")

    @classmethod
    def parse(cls, value: str | time | LocalTime) -> LocalTime:
        if isinstance(value, LocalTime):
            return value
        if isinstance(value, time):
            return cls(value.hour * 60 + value.minute)
        m = _HHMM.match(value.strip()) if isinstance(value, str) else None
        if not m:
            raise InvalidInputError(f"Hora inválida (use HH:MM): {value!r}")
        hh, mm = int(m.group(1)), int(m.group(2))
        if hh > 23 or mm > 59:
            raise InvalidInputError(f"Hora inválida (use HH:MM): {value!r}")
        return cls(hh * 60 + mm)

    @property
    def is_hour_aligned(self) -> bool:
        return self.minutes % 60 == 0

    def to_time(self) -> time:
        # 1440 wraps to 00:00, same as the stored sentinel
        m = self.minutes % MINUTES_PER_DAY
        return time(m // 60, m % 60)

    def __str__(self) -> str:
        return self.to_time().strftime("%H:%M")


# "00:00" as an end time means the end of the day, not its beginning.
MIDNIGHT = LocalTime(0)
END_OF_DAY = LocalTime(MINUTES_PER_DAY)


def effective_end_minutes(end: str | time | LocalTime) -> int:
    """Minutes of an end boundary, reading the midnight sentinel as 1440."""
    t = LocalTime.parse(end)
    return MINUTES_PER_DAY if t == MIDNIGHT else t.minutes


def effective_end(end: str | time | LocalTime) -> LocalTime:
    return LocalTime(effective_end_minutes(end))


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Fecha inválida (use AAAA-MM-DD): {value!r}") from exc


def sunday_weekday(d: date) -> int:
    """0=Sunday .. 6=Saturday, the numbering used by weekly rules."""
    return (d.weekday() + 1) % 7
