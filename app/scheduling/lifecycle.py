"""
Appointment state machine.

    (new) --(>= 24h ahead)--> pending_confirmation --confirm--> confirmed
    (new) --(<  24h ahead)--> confirmed
    pending_confirmation | confirmed --cancel--> cancelled   (terminal)
    confirmed --(end elapsed)--> completed                    (terminal)
"""

from __future__ import annotations

from datetime import datetime, timedelta

from app.core.errors import InvalidTransitionError
from app.models.appointment import Appointment, AppointmentStatus

S = AppointmentStatus

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    S.PENDING_CONFIRMATION: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}

TERMINAL = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def initial_status(
    scheduled_at: datetime, now: datetime, confirmation_hours: int = 24
) -> AppointmentStatus:
    """Far-away bookings need an explicit confirmation later; close ones don't."""
    if scheduled_at - now >= timedelta(hours=confirmation_hours):
        return S.PENDING_CONFIRMATION
    return S.CONFIRMED


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Transición no permitida: {current.value} -> {target.value}"
        )


def has_elapsed(appointment: Appointment, now: datetime) -> bool:
    return now >= appointment.ends_at


def ensure_can_complete(appointment: Appointment, now: datetime) -> None:
    ensure_transition(appointment.status, S.COMPLETED)
    if not has_elapsed(appointment, now):
        raise InvalidTransitionError("La cita aún no ha terminado")
