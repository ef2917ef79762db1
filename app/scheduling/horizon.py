from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.core.errors import OutOfHorizonError
from app.utils.tz import local_today


@dataclass(frozen=True)
class DateHorizonPolicy:
    """Bookable dates: today <= d <= today + days, on the clinic calendar."""

    tz: ZoneInfo
    days: int = 14

    def bounds(self, now: datetime) -> tuple[date, date]:
        today = local_today(now, self.tz)
        return today, today + timedelta(days=self.days)

    def contains(self, d: date, now: datetime) -> bool:
        first, last = self.bounds(now)
        return first <= d <= last

    def check(self, d: date, now: datetime) -> None:
        if not self.contains(d, now):
            first, last = self.bounds(now)
            raise OutOfHorizonError(
                f"{d.isoformat()} fuera del rango reservable "
                f"({first.isoformat()} a {last.isoformat()})"
            )

    def dates(self, now: datetime) -> list[date]:
        first, _ = self.bounds(now)
        return [first + timedelta(days=i) for i in range(self.days + 1)]
