"""
Effective availability for one calendar date.

Precedence: date overrides > weekly rules > nothing. An override on a date
replaces every weekly rule of that date (it is never merged with them), and
a date with neither produces no windows: no default schedule is invented.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, time

from app.core.errors import InvalidInputError
from app.models.availability import DateOverride, WeeklyRule
from app.scheduling.clock import LocalTime, effective_end, parse_date, sunday_weekday


class AvailabilitySource(str, enum.Enum):
    DATE_OVERRIDE = "date_override"
    WEEKLY_RULE = "weekly_rule"
    NONE = "none"


@dataclass(frozen=True, order=True)
class Window:
    """Local [start, end) window; end is already the effective end (<= 1440)."""

    start: LocalTime
    end: LocalTime

    @classmethod
    def from_times(cls, start: str | time | LocalTime, end: str | time | LocalTime) -> Window:
        validate_window(start, end)
        return cls(LocalTime.parse(start), effective_end(end))

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        return self.start.minutes <= start_minutes and end_minutes <= self.end.minutes


@dataclass(frozen=True)
class ResolvedAvailability:
    for_date: date
    source: AvailabilitySource
    windows: list[Window] = field(default_factory=list)


def validate_window(start: str | time | LocalTime, end: str | time | LocalTime) -> None:
    """start < effective end, or InvalidInputError."""
    s = LocalTime.parse(start)
    e = effective_end(end)
    if s.minutes >= e.minutes:
        raise InvalidInputError(
            f"La hora de inicio ({s}) debe ser anterior a la de término ({LocalTime.parse(end)})"
        )


def windows_overlap(a: Window, b: Window) -> bool:
    return a.start.minutes < b.end.minutes and b.start.minutes < a.end.minutes


def resolve_availability(
    target: str | date,
    rules: Iterable[WeeklyRule],
    overrides: Iterable[DateOverride],
) -> ResolvedAvailability:
    """Effective windows for `target`, sorted by start."""
    d = parse_date(target)

    day_overrides = [o for o in overrides if o.for_date == d]
    if day_overrides:
        windows = [
            Window.from_times(o.start_time, o.end_time)
            for o in day_overrides
            if o.is_available
        ]
        return ResolvedAvailability(d, AvailabilitySource.DATE_OVERRIDE, sorted(windows))

    weekday = sunday_weekday(d)
    day_rules = [r for r in rules if r.weekday == weekday]
    if day_rules:
        windows = [Window.from_times(r.start_time, r.end_time) for r in day_rules]
        return ResolvedAvailability(d, AvailabilitySource.WEEKLY_RULE, sorted(windows))

    return ResolvedAvailability(d, AvailabilitySource.NONE, [])
