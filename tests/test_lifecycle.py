from datetime import UTC, datetime, timedelta

import pytest

from app.core.errors import InvalidTransitionError
from app.models.appointment import Appointment, AppointmentStatus
from app.scheduling import lifecycle

S = AppointmentStatus
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def test_far_booking_needs_confirmation():
    assert lifecycle.initial_status(NOW + timedelta(hours=24), NOW) == S.PENDING_CONFIRMATION
    assert lifecycle.initial_status(NOW + timedelta(days=5), NOW) == S.PENDING_CONFIRMATION


def test_close_booking_is_confirmed_directly():
    assert lifecycle.initial_status(NOW + timedelta(hours=23, minutes=59), NOW) == S.CONFIRMED


def test_threshold_is_configurable():
    assert lifecycle.initial_status(NOW + timedelta(hours=30), NOW, 48) == S.CONFIRMED


@pytest.mark.parametrize(
    "current,target",
    [
        (S.PENDING_CONFIRMATION, S.CONFIRMED),
        (S.PENDING_CONFIRMATION, S.CANCELLED),
        (S.CONFIRMED, S.COMPLETED),
        (S.CONFIRMED, S.CANCELLED),
    ],
)
def test_allowed_transitions(current, target):
    assert lifecycle.can_transition(current, target)
    lifecycle.ensure_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.PENDING_CONFIRMATION, S.COMPLETED),
        (S.CONFIRMED, S.PENDING_CONFIRMATION),
        (S.CANCELLED, S.CONFIRMED),
        (S.COMPLETED, S.CANCELLED),
    ],
)
def test_rejected_transitions(current, target):
    assert not lifecycle.can_transition(current, target)
    with pytest.raises(InvalidTransitionError):
        lifecycle.ensure_transition(current, target)


def test_terminal_states():
    assert lifecycle.TERMINAL == {S.COMPLETED, S.CANCELLED}


def test_complete_only_after_end():
    ap = Appointment(
        professional_id=1,
        patient_id=1,
        scheduled_at=NOW - timedelta(minutes=30),
        duration_minutes=55,
        status=S.CONFIRMED,
    )
    with pytest.raises(InvalidTransitionError):
        lifecycle.ensure_can_complete(ap, NOW)
    lifecycle.ensure_can_complete(ap, NOW + timedelta(minutes=25))
