from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date

from app.core.errors import InvalidInputError
from app.scheduling.availability import Window
from app.scheduling.clock import LocalTime

DEFAULT_SLOT_MINUTES = 60


@dataclass(frozen=True)
class CandidateSlot:
    date: date
    start_time: LocalTime
    end_time: LocalTime
    available: bool = True

    def mark(self, available: bool) -> CandidateSlot:
        return replace(self, available=available)


def generate_slots(
    window: Window, for_date: date, duration_minutes: int = DEFAULT_SLOT_MINUTES
) -> list[CandidateSlot]:
    """
    Splits a window into `duration_minutes` steps starting at window.start.
    Only steps starting on a full hour are kept, and a step that would run
    past the window end is dropped (no partial slots).
    """
    if duration_minutes <= 0:
        raise InvalidInputError("La duración del bloque debe ser positiva")

    out: list[CandidateSlot] = []
    cur = window.start.minutes
    while cur + duration_minutes <= window.end.minutes:
        if cur % 60 == 0:
            out.append(
                CandidateSlot(
                    date=for_date,
                    start_time=LocalTime(cur),
                    end_time=LocalTime(cur + duration_minutes),
                )
            )
        cur += duration_minutes
    return out


def generate_day_slots(
    windows: Iterable[Window], for_date: date, duration_minutes: int = DEFAULT_SLOT_MINUTES
) -> list[CandidateSlot]:
    """All windows of a day, merged in start order without duplicates."""
    seen: dict[int, CandidateSlot] = {}
    for w in windows:
        for slot in generate_slots(w, for_date, duration_minutes):
            seen.setdefault(slot.start_time.minutes, slot)
    return [seen[k] for k in sorted(seen)]
