from datetime import UTC, datetime, timedelta

import pytest

from app.models.appointment import Appointment, AppointmentStatus
from app.scheduling.windows import (
    ConfirmationReason,
    ConfirmationWindow,
    JoinPhase,
    MeetingJoinWindow,
    PlanRenewalWindow,
    SurveyWindow,
    countdown_message,
)

T = datetime(2025, 6, 2, 13, 0, tzinfo=UTC)


def appt(status=AppointmentStatus.PENDING_CONFIRMATION, duration=50):
    return Appointment(
        id=7,
        professional_id=1,
        patient_id=1,
        scheduled_at=T,
        duration_minutes=duration,
        status=status,
    )


# ---------- confirmation ----------


def test_confirmation_open_inside_24h():
    d = ConfirmationWindow(24).evaluate(appt(), T - timedelta(hours=23))
    assert d.allowed
    assert d.reason == ConfirmationReason.ALLOWED


def test_confirmation_open_exactly_at_threshold():
    assert ConfirmationWindow(24).is_open(appt(), T - timedelta(hours=24))


def test_confirmation_too_early():
    d = ConfirmationWindow(24).evaluate(appt(), T - timedelta(hours=25))
    assert not d.allowed
    assert d.reason == ConfirmationReason.TOO_EARLY


def test_confirmation_after_start():
    d = ConfirmationWindow(24).evaluate(appt(), T)
    assert d.reason == ConfirmationReason.ALREADY_PASSED


def test_confirmation_requires_pending():
    d = ConfirmationWindow(24).evaluate(appt(AppointmentStatus.CONFIRMED), T - timedelta(hours=2))
    assert d.reason == ConfirmationReason.NOT_PENDING


def test_confirmation_threshold_injected():
    assert ConfirmationWindow(48).is_open(appt(), T - timedelta(hours=30))


# ---------- meeting join ----------


@pytest.mark.parametrize(
    "offset,allowed",
    [
        (timedelta(minutes=-5), True),
        (timedelta(minutes=-5, seconds=-1), False),
        (timedelta(minutes=55), True),
        (timedelta(minutes=55, seconds=1), False),
        (timedelta(minutes=20), True),
    ],
)
def test_join_window_bounds(offset, allowed):
    assert MeetingJoinWindow(5).is_open(appt(AppointmentStatus.CONFIRMED), T + offset) is allowed


def test_join_phases():
    w = MeetingJoinWindow(5)
    ap = appt(AppointmentStatus.CONFIRMED)
    assert w.evaluate(ap, T - timedelta(hours=2)).phase == JoinPhase.NOT_YET_OPEN
    assert w.evaluate(ap, T - timedelta(minutes=3)).phase == JoinPhase.STARTING_SOON
    assert w.evaluate(ap, T + timedelta(minutes=10)).phase == JoinPhase.IN_PROGRESS
    assert w.evaluate(ap, T + timedelta(minutes=52)).phase == JoinPhase.GRACE_PERIOD
    st = w.evaluate(ap, T + timedelta(hours=2))
    assert st.phase == JoinPhase.EXPIRED
    assert st.message == "La ventana de acceso ha expirado"


def test_join_not_open_message_counts_down():
    st = MeetingJoinWindow(5).evaluate(appt(), T - timedelta(minutes=35))
    assert not st.allowed
    assert st.message == "Disponible en 30 minutos"


@pytest.mark.parametrize(
    "minutes,message",
    [
        (1, "Disponible en 1 minuto"),
        (45, "Disponible en 45 minutos"),
        (60, "Disponible en 60 minutos"),
        (61, "Disponible en 1 hora"),
        (180, "Disponible en 3 horas"),
        (1441, "Disponible en 1 día"),
        (3 * 1440, "Disponible en 3 días"),
    ],
)
def test_countdown_message(minutes, message):
    assert countdown_message(minutes) == message


# ---------- survey ----------


def test_survey_not_before_appointment():
    st = SurveyWindow(7).evaluate(appt(AppointmentStatus.COMPLETED), T - timedelta(minutes=1), False)
    assert not st.can_rate


def test_survey_open_within_seven_days():
    st = SurveyWindow(7).evaluate(appt(AppointmentStatus.COMPLETED), T + timedelta(days=2), False)
    assert st.can_rate
    assert st.is_within_72_hours
    assert st.days_since == 2


def test_survey_closed_after_seven_days():
    st = SurveyWindow(7).evaluate(
        appt(AppointmentStatus.COMPLETED), T + timedelta(days=7, minutes=1), False
    )
    assert not st.can_rate
    assert not st.is_within_7_days


def test_survey_only_once():
    st = SurveyWindow(7).evaluate(appt(AppointmentStatus.COMPLETED), T + timedelta(days=1), True)
    assert st.has_rated
    assert not st.can_rate


def test_survey_not_for_cancelled():
    st = SurveyWindow(7).evaluate(appt(AppointmentStatus.CANCELLED), T + timedelta(days=1), False)
    assert not st.can_rate


# ---------- plan renewal ----------

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def test_first_payment_always_allowed():
    d = PlanRenewalWindow().evaluate(None, NOW)
    assert d.can_renew
    assert d.days_until_expiry is None


def test_renewal_blocked_more_than_five_days_before():
    d = PlanRenewalWindow(5).evaluate(NOW + timedelta(days=12), NOW)
    assert not d.can_renew
    assert d.days_until_expiry == 12
    assert d.days_until_renewal == 7


@pytest.mark.parametrize("days", [5, 3, 1])
def test_renewal_open_five_days_or_less(days):
    assert PlanRenewalWindow(5).evaluate(NOW + timedelta(days=days), NOW).can_renew


def test_renewal_partial_day_rounds_up():
    # 5 days and 1 hour left counts as 6
    assert not PlanRenewalWindow(5).evaluate(NOW + timedelta(days=5, hours=1), NOW).can_renew


def test_renewal_open_when_expired():
    d = PlanRenewalWindow(5).evaluate(NOW - timedelta(days=2), NOW)
    assert d.can_renew
    assert d.days_until_expiry <= 0


def test_next_expiration():
    w = PlanRenewalWindow(5, period_days=30)
    current = NOW + timedelta(days=3)
    assert w.next_expiration(current, NOW) == current + timedelta(days=30)
    assert w.next_expiration(None, NOW) == NOW + timedelta(days=30)
