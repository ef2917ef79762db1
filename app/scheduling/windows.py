"""
Time-gated permissions.

Each policy is a pure function of "now" and one timestamp (plus whatever
it was configured with); none of them reads configuration or the database
at call time.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.models.appointment import Appointment, AppointmentStatus

_MINUTES_PER_DAY = 24 * 60


def _plural(n: int, singular: str, plural: str) -> str:
    return f"{n} {singular if n == 1 else plural}"


# ---------- confirmation ----------


class ConfirmationReason(str, enum.Enum):
    ALLOWED = "allowed"
    NOT_PENDING = "not_pending"
    ALREADY_PASSED = "already_passed"
    TOO_EARLY = "too_early"


@dataclass(frozen=True)
class ConfirmationDecision:
    allowed: bool
    reason: ConfirmationReason
    hours_until: float
    message: str


class ConfirmationWindow:
    """pending_confirmation may be confirmed when 0 < hours_until <= hours_before."""

    def __init__(self, hours_before: int = 24):
        self.hours_before = hours_before

    def evaluate(self, appointment: Appointment, now: datetime) -> ConfirmationDecision:
        hours_until = (appointment.scheduled_at - now).total_seconds() / 3600

        if appointment.status != AppointmentStatus.PENDING_CONFIRMATION:
            return ConfirmationDecision(
                False,
                ConfirmationReason.NOT_PENDING,
                hours_until,
                "Esta cita no requiere confirmación",
            )
        if hours_until <= 0:
            return ConfirmationDecision(
                False, ConfirmationReason.ALREADY_PASSED, hours_until, "Esta cita ya pasó"
            )
        if hours_until > self.hours_before:
            return ConfirmationDecision(
                False,
                ConfirmationReason.TOO_EARLY,
                hours_until,
                f"Solo puedes confirmar asistencia {self.hours_before} horas antes de la cita",
            )
        return ConfirmationDecision(
            True, ConfirmationReason.ALLOWED, hours_until, "Puedes confirmar tu asistencia"
        )

    def is_open(self, appointment: Appointment, now: datetime) -> bool:
        return self.evaluate(appointment, now).allowed


# ---------- meeting join ----------


class JoinPhase(str, enum.Enum):
    NOT_YET_OPEN = "not_yet_open"
    STARTING_SOON = "starting_soon"
    IN_PROGRESS = "in_progress"
    GRACE_PERIOD = "grace_period"
    EXPIRED = "expired"


@dataclass(frozen=True)
class JoinStatus:
    allowed: bool
    phase: JoinPhase
    message: str
    opens_at: datetime
    closes_at: datetime


class MeetingJoinWindow:
    """Join is enabled from `grace` before the start to `grace` after the end."""

    def __init__(self, grace_minutes: int = 5):
        self.grace = timedelta(minutes=grace_minutes)

    def bounds(self, appointment: Appointment) -> tuple[datetime, datetime]:
        return appointment.scheduled_at - self.grace, appointment.ends_at + self.grace

    def evaluate(self, appointment: Appointment, now: datetime) -> JoinStatus:
        start, end = appointment.scheduled_at, appointment.ends_at
        opens_at, closes_at = self.bounds(appointment)

        if now < opens_at:
            minutes = math.ceil((opens_at - now).total_seconds() / 60)
            return JoinStatus(
                False, JoinPhase.NOT_YET_OPEN, countdown_message(minutes), opens_at, closes_at
            )
        if now > closes_at:
            return JoinStatus(
                False,
                JoinPhase.EXPIRED,
                "La ventana de acceso ha expirado",
                opens_at,
                closes_at,
            )

        if now < start:
            minutes = math.ceil((start - now).total_seconds() / 60)
            phase = JoinPhase.STARTING_SOON
            message = f"La sesión comenzará en {_plural(minutes, 'minuto', 'minutos')}"
        elif now <= end:
            remaining = math.floor((end - now).total_seconds() / 60)
            phase = JoinPhase.IN_PROGRESS
            message = (
                f"Sesión en curso - {_plural(remaining, 'minuto restante', 'minutos restantes')}"
            )
        else:
            grace = int(self.grace.total_seconds() // 60)
            phase = JoinPhase.GRACE_PERIOD
            message = f"Sesión finalizada - Puedes acceder por {grace} minutos más"
        return JoinStatus(True, phase, message, opens_at, closes_at)

    def is_open(self, appointment: Appointment, now: datetime) -> bool:
        return self.evaluate(appointment, now).allowed


def countdown_message(minutes: int) -> str:
    """'Disponible en N ...' in the largest whole unit that fits."""
    if minutes > _MINUTES_PER_DAY:
        return f"Disponible en {_plural(minutes // _MINUTES_PER_DAY, 'día', 'días')}"
    if minutes > 60:
        return f"Disponible en {_plural(minutes // 60, 'hora', 'horas')}"
    return f"Disponible en {_plural(minutes, 'minuto', 'minutos')}"


# ---------- satisfaction survey ----------


@dataclass(frozen=True)
class SurveyStatus:
    appointment_id: int | None
    can_rate: bool
    has_rated: bool
    days_since: int
    hours_since: int
    is_within_72_hours: bool
    is_within_7_days: bool


class SurveyWindow:
    """One rating per appointment, from its start until `days` later."""

    def __init__(self, days: int = 7):
        self.days = days

    def evaluate(self, appointment: Appointment, now: datetime, has_rated: bool) -> SurveyStatus:
        elapsed = now - appointment.scheduled_at
        hours = elapsed.total_seconds() / 3600
        days = hours / 24

        within_72h = 0 <= hours <= 72
        within_window = 0 <= days <= self.days
        can_rate = (
            within_window
            and not has_rated
            and appointment.status != AppointmentStatus.CANCELLED
        )
        return SurveyStatus(
            appointment_id=appointment.id,
            can_rate=can_rate,
            has_rated=has_rated,
            days_since=math.floor(days),
            hours_since=math.floor(hours),
            is_within_72_hours=within_72h,
            is_within_7_days=within_window,
        )


# ---------- plan renewal ----------


@dataclass(frozen=True)
class RenewalDecision:
    can_renew: bool
    days_until_expiry: int | None
    days_until_renewal: int | None
    message: str


class PlanRenewalWindow:
    """Monthly plans renew only within `days_before` days of expiry (or after it)."""

    def __init__(self, days_before: int = 5, period_days: int = 30):
        self.days_before = days_before
        self.period = timedelta(days=period_days)

    def evaluate(self, expires_at: datetime | None, now: datetime) -> RenewalDecision:
        if expires_at is None:
            # first payment
            return RenewalDecision(True, None, None, "Puedes contratar tu plan ahora")

        days_left = math.ceil((expires_at - now).total_seconds() / 86400)
        if days_left <= 0:
            return RenewalDecision(
                True, days_left, 0, "Tu plan ha expirado. Puedes renovarlo ahora."
            )
        if days_left > self.days_before:
            return RenewalDecision(
                False,
                days_left,
                days_left - self.days_before,
                f"Podrás renovar tu plan cuando falten {self.days_before} días "
                "o menos para su expiración.",
            )
        return RenewalDecision(
            True,
            days_left,
            0,
            f"Tu plan expira en {_plural(days_left, 'día', 'días')}. Puedes renovarlo ahora.",
        )

    def next_expiration(self, expires_at: datetime | None, now: datetime) -> datetime:
        """+period from the current expiry, or from now on the first payment."""
        if expires_at is None:
            return now + self.period
        return expires_at + self.period
