"""
Slot filter: removes candidates that collide with blocked intervals or
existing bookings.

Candidate slots are local wall-clock values; blocks and appointments are
absolute instants. `local_slot_to_utc` is the only place where the first
are turned into the second.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.core.settings import ConflictMode
from app.models.appointment import ACTIVE_STATUSES, Appointment
from app.models.blocked_slot import BlockedInterval
from app.scheduling.slots import CandidateSlot
from app.utils.tz import combine_local_to_utc


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # [start, end) intervals, end exclusive
    return a_start < b_end and b_start < a_end


def local_slot_to_utc(slot: CandidateSlot, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Absolute [start, end) of a candidate slot read in the clinic TZ."""
    start = combine_local_to_utc(slot.date, slot.start_time.to_time(), tz)
    # end may be 24:00: count wall-clock minutes from the local midnight
    local_midnight = datetime.combine(slot.date, time.min).replace(tzinfo=tz)
    end = (local_midnight + timedelta(minutes=slot.end_time.minutes)).astimezone(UTC)
    return start, end


def is_blocked(start: datetime, end: datetime, blocks: Iterable[BlockedInterval]) -> bool:
    return any(overlaps(start, end, b.starts_at, b.ends_at) for b in blocks)


def is_booked(
    start: datetime,
    end: datetime,
    appointments: Iterable[Appointment],
    mode: ConflictMode = ConflictMode.START,
) -> bool:
    active = [a for a in appointments if a.status in ACTIVE_STATUSES]
    if mode == ConflictMode.OVERLAP:
        return any(overlaps(start, end, a.scheduled_at, a.ends_at) for a in active)
    return any(a.scheduled_at == start for a in active)


def filter_slots(
    slots: Iterable[CandidateSlot],
    blocks: Iterable[BlockedInterval],
    appointments: Iterable[Appointment],
    tz: ZoneInfo,
    *,
    now: datetime | None = None,
    mode: ConflictMode = ConflictMode.START,
) -> list[CandidateSlot]:
    """
    Returns every slot annotated: available=True only if it is not blocked,
    not booked and (when `now` is given) starts strictly after `now`.
    """
    blocks = list(blocks)
    appointments = list(appointments)
    out: list[CandidateSlot] = []
    for slot in slots:
        start, end = local_slot_to_utc(slot, tz)
        ok = not is_blocked(start, end, blocks) and not is_booked(
            start, end, appointments, mode
        )
        if ok and now is not None and start <= now:
            ok = False
        out.append(slot.mark(ok))
    return out
