from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

from app.core.settings import ConflictMode
from app.models.appointment import Appointment, AppointmentStatus
from app.models.blocked_slot import BlockedInterval
from app.scheduling.availability import Window
from app.scheduling.overlap import filter_slots, local_slot_to_utc, overlaps
from app.scheduling.slots import generate_slots
from app.utils.tz import combine_local_to_utc

SCL = ZoneInfo("America/Santiago")
MONDAY = date(2025, 6, 2)


def at(hh, mm=0, d=MONDAY):
    return combine_local_to_utc(d, time(hh, mm), SCL)


def monday_slots():
    return generate_slots(Window.from_times("09:00", "12:00"), MONDAY)


def free(slots):
    return [str(s.start_time) for s in slots if s.available]


def appointment(hh, mm=0, status=AppointmentStatus.CONFIRMED, duration=55):
    return Appointment(
        professional_id=1,
        patient_id=1,
        scheduled_at=at(hh, mm),
        duration_minutes=duration,
        status=status,
    )


def test_overlaps_is_half_open():
    a, b, c = at(9), at(10), at(11)
    assert overlaps(a, c, b, c)
    assert not overlaps(a, b, b, c)


def test_local_slot_to_utc():
    slot = monday_slots()[0]
    assert local_slot_to_utc(slot, SCL) == (
        datetime(2025, 6, 2, 13, 0, tzinfo=UTC),
        datetime(2025, 6, 2, 14, 0, tzinfo=UTC),
    )


def test_end_of_day_slot_ends_next_local_midnight():
    slot = generate_slots(Window.from_times("23:00", "00:00"), MONDAY)[0]
    start, end = local_slot_to_utc(slot, SCL)
    assert end == combine_local_to_utc(date(2025, 6, 3), time(0, 0), SCL)


def test_no_blocks_no_bookings_everything_free():
    out = filter_slots(monday_slots(), [], [], SCL)
    assert free(out) == ["09:00", "10:00", "11:00"]


def test_partial_block_removes_whole_slot():
    block = BlockedInterval(professional_id=1, starts_at=at(10), ends_at=at(10, 30))
    out = filter_slots(monday_slots(), [block], [], SCL)
    assert free(out) == ["09:00", "11:00"]
    # every candidate is still returned, annotated
    assert [str(s.start_time) for s in out] == ["09:00", "10:00", "11:00"]


def test_block_touching_slot_edge_does_not_remove_it():
    block = BlockedInterval(professional_id=1, starts_at=at(8), ends_at=at(9))
    out = filter_slots(monday_slots(), [block], [], SCL)
    assert free(out) == ["09:00", "10:00", "11:00"]


def test_booked_start_removed():
    out = filter_slots(monday_slots(), [], [appointment(11)], SCL)
    assert free(out) == ["09:00", "10:00"]


def test_cancelled_and_completed_do_not_hold_the_slot():
    aps = [
        appointment(9, status=AppointmentStatus.CANCELLED),
        appointment(10, status=AppointmentStatus.COMPLETED),
    ]
    out = filter_slots(monday_slots(), [], aps, SCL)
    assert free(out) == ["09:00", "10:00", "11:00"]


def test_pending_confirmation_holds_the_slot():
    aps = [appointment(9, status=AppointmentStatus.PENDING_CONFIRMATION)]
    out = filter_slots(monday_slots(), [], aps, SCL)
    assert free(out) == ["10:00", "11:00"]


def test_start_mode_ignores_off_grid_overlap():
    # 09:30 booking does not share a start with any slot
    out = filter_slots(monday_slots(), [], [appointment(9, 30)], SCL, mode=ConflictMode.START)
    assert free(out) == ["09:00", "10:00", "11:00"]


def test_overlap_mode_catches_off_grid_overlap():
    out = filter_slots(
        monday_slots(), [], [appointment(9, 30)], SCL, mode=ConflictMode.OVERLAP
    )
    assert free(out) == ["11:00"]


def test_past_slots_unavailable():
    now = at(10)
    out = filter_slots(monday_slots(), [], [], SCL, now=now)
    assert free(out) == ["11:00"]
