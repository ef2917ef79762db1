"""
Booking flow on top of the pure scheduling engine.

    rules + overrides --resolve--> windows --generate--> candidates
    candidates + blocks + bookings --filter--> bookable slots

Bookings re-run the whole pipeline against current data right before the
insert; the partial unique index decides concurrent races.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from app.core.errors import (
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    OutOfHorizonError,
    RenewalNotOpenError,
    SlotConflictError,
    WindowClosedError,
)
from app.core.logging import get_logger
from app.core.settings import ConflictMode
from app.models.appointment import ACTIVE_STATUSES, Appointment, AppointmentStatus
from app.models.availability import DateOverride, WeeklyRule
from app.models.blocked_slot import BlockedInterval
from app.models.professional import Professional
from app.models.satisfaction_survey import RATING_FIELDS
from app.repositories.scheduling import SchedulingRepository
from app.scheduling import lifecycle
from app.scheduling.availability import resolve_availability
from app.scheduling.clock import LocalTime, parse_date, sunday_weekday
from app.scheduling.overlap import filter_slots, is_blocked, is_booked, local_slot_to_utc
from app.scheduling.policies import SchedulingPolicies
from app.scheduling.slots import CandidateSlot, generate_day_slots
from app.scheduling.windows import (
    ConfirmationDecision,
    ConfirmationReason,
    JoinStatus,
    RenewalDecision,
    SurveyStatus,
)
from app.utils.tz import combine_local_to_utc

log = get_logger()

Clock = Callable[[], datetime]

# appointments starting this long before a day can still reach into it
_LOOKBACK = timedelta(days=1)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class _DayData:
    rules: list[WeeklyRule]
    overrides: list[DateOverride]
    blocks: list[BlockedInterval]
    appointments: list[Appointment]


class SchedulingService:
    def __init__(
        self,
        repo: SchedulingRepository,
        policies: SchedulingPolicies,
        clock: Clock = utc_now,
    ):
        self.repo = repo
        self.policies = policies
        self.clock = clock

    # ---------- helpers ----------

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock()

    def _day_bounds_utc(self, first: date, last: date) -> tuple[datetime, datetime]:
        tz = self.policies.tz
        start = combine_local_to_utc(first, time.min, tz)
        end = combine_local_to_utc(last + timedelta(days=1), time.min, tz)
        return start, end

    def _load(self, professional_id: int, first: date, last: date) -> _DayData:
        start, end = self._day_bounds_utc(first, last)
        weekday = sunday_weekday(first) if first == last else None
        return _DayData(
            rules=self.repo.list_weekly_rules(professional_id, weekday),
            overrides=self.repo.list_overrides(professional_id, first, last),
            blocks=self.repo.list_blocked_intervals(professional_id, start, end),
            appointments=self.repo.list_appointments(
                professional_id, start - _LOOKBACK, end, statuses=ACTIVE_STATUSES
            ),
        )

    def _slots_for(self, d: date, data: _DayData, now: datetime) -> list[CandidateSlot]:
        resolved = resolve_availability(d, data.rules, data.overrides)
        if not resolved.windows:
            return []
        candidates = generate_day_slots(resolved.windows, d, self.policies.slot_minutes)
        return filter_slots(
            candidates,
            data.blocks,
            data.appointments,
            self.policies.tz,
            now=now,
            mode=self.policies.conflict_mode,
        )

    def _interval_conflict(
        self,
        d: date,
        data: _DayData,
        start_time: LocalTime,
        scheduled_at: datetime,
        duration: int,
    ) -> str | None:
        """Checks the stored interval, which may be longer than the slot."""
        end_minutes = start_time.minutes + duration
        windows = resolve_availability(d, data.rules, data.overrides).windows
        if not any(w.contains(start_time.minutes, end_minutes) for w in windows):
            return "outside_window"
        ends_at = scheduled_at + timedelta(minutes=duration)
        if is_blocked(scheduled_at, ends_at, data.blocks):
            return "blocked"
        if self.policies.conflict_mode == ConflictMode.OVERLAP and is_booked(
            scheduled_at, ends_at, data.appointments, ConflictMode.OVERLAP
        ):
            return "overlaps_booking"
        return None

    def _get_professional(self, professional_id: int) -> Professional:
        prof = self.repo.get_professional(professional_id)
        if prof is None:
            raise NotFoundError("Profesional no encontrado")
        return prof

    def _get_appointment(self, appointment_id: int) -> Appointment:
        ap = self.repo.get_appointment(appointment_id)
        if ap is None:
            raise NotFoundError("Cita no encontrada")
        return ap

    def _set_status(self, ap: Appointment, target: AppointmentStatus) -> Appointment:
        previous = ap.status
        lifecycle.ensure_transition(previous, target)
        ap = self.repo.update_appointment_status(ap, target)
        log.info(
            f"appointment.{target.value}",
            appointment_id=ap.id,
            previous=previous.value,
            status=target.value,
        )
        return ap

    # ---------- availability ----------

    def resolve_slots(
        self, professional_id: int, for_date: str | date, now: datetime | None = None
    ) -> list[CandidateSlot]:
        """Every candidate of the date, annotated with `available`."""
        now = self._now(now)
        d = parse_date(for_date)
        try:
            self.policies.horizon.check(d, now)
        except OutOfHorizonError as exc:
            log.info("slots.out_of_horizon", professional_id=professional_id, date=d.isoformat(), reason=exc.message)
            return []

        slots = self._slots_for(d, self._load(professional_id, d, d), now)
        log.info(
            "slots.resolved",
            professional_id=professional_id,
            date=d.isoformat(),
            total=len(slots),
            available=sum(1 for s in slots if s.available),
        )
        return slots

    def resolve_available_slots(
        self, professional_id: int, for_date: str | date, now: datetime | None = None
    ) -> list[CandidateSlot]:
        return [s for s in self.resolve_slots(professional_id, for_date, now) if s.available]

    def resolve_available_dates(
        self, professional_id: int, now: datetime | None = None
    ) -> list[date]:
        """Horizon dates with at least one bookable slot."""
        now = self._now(now)
        days = self.policies.horizon.dates(now)
        data = self._load(professional_id, days[0], days[-1])
        out = [d for d in days if any(s.available for s in self._slots_for(d, data, now))]
        log.info("dates.resolved", professional_id=professional_id, count=len(out))
        return out

    # ---------- booking ----------

    def book_slot(
        self,
        professional_id: int,
        patient_id: int,
        for_date: str | date,
        start: str | time | LocalTime,
        duration_minutes: int | None = None,
        now: datetime | None = None,
    ) -> Appointment:
        now = self._now(now)
        d = parse_date(for_date)
        start_time = LocalTime.parse(start)
        if duration_minutes is None:
            duration = self.policies.default_duration_minutes
        else:
            duration = duration_minutes
        if duration <= 0:
            raise InvalidInputError("La duración de la cita debe ser positiva")

        prof = self._get_professional(professional_id)
        if not prof.is_active:
            raise InvalidInputError("Profesional inactivo")

        if not self.policies.horizon.contains(d, now):
            log.info("booking.conflict", professional_id=professional_id, reason="out_of_horizon")
            raise SlotConflictError("La fecha está fuera del rango reservable")

        # fresh read, right before the write
        data = self._load(professional_id, d, d)
        slots = self._slots_for(d, data, now)
        slot = next((s for s in slots if s.start_time == start_time), None)
        if slot is None or not slot.available:
            log.info(
                "booking.conflict",
                professional_id=professional_id,
                date=d.isoformat(),
                start=str(start_time),
                reason="not_offered" if slot is None else "taken_or_blocked",
            )
            raise SlotConflictError("Horario no disponible. Elige otro horario.")

        scheduled_at, _ = local_slot_to_utc(slot, self.policies.tz)
        reason = self._interval_conflict(d, data, start_time, scheduled_at, duration)
        if reason is not None:
            log.info(
                "booking.conflict",
                professional_id=professional_id,
                date=d.isoformat(),
                start=str(start_time),
                duration_minutes=duration,
                reason=reason,
            )
            raise SlotConflictError("Horario no disponible. Elige otro horario.")

        status = lifecycle.initial_status(
            scheduled_at, now, self.policies.confirmation.hours_before
        )
        try:
            ap = self.repo.create_appointment(
                professional_id=professional_id,
                patient_id=patient_id,
                scheduled_at=scheduled_at,
                duration_minutes=duration,
                status=status,
            )
        except SlotConflictError:
            log.warning("booking.conflict", professional_id=professional_id, reason="race_lost")
            raise

        log.info(
            "booking.created",
            appointment_id=ap.id,
            professional_id=professional_id,
            scheduled_at=scheduled_at.isoformat(),
            status=status.value,
        )
        return ap

    # ---------- lifecycle ----------

    def confirm_appointment(self, appointment_id: int, now: datetime | None = None) -> Appointment:
        now = self._now(now)
        ap = self._get_appointment(appointment_id)
        decision = self.policies.confirmation.evaluate(ap, now)
        if not decision.allowed:
            log.info("lifecycle.rejected", appointment_id=ap.id, action="confirm", reason=decision.reason.value)
            if decision.reason == ConfirmationReason.NOT_PENDING:
                raise InvalidTransitionError(decision.message)
            raise WindowClosedError(decision.message)
        return self._set_status(ap, AppointmentStatus.CONFIRMED)

    def cancel_appointment(self, appointment_id: int) -> Appointment:
        ap = self._get_appointment(appointment_id)
        return self._set_status(ap, AppointmentStatus.CANCELLED)

    def complete_appointment(self, appointment_id: int, now: datetime | None = None) -> Appointment:
        now = self._now(now)
        ap = self._get_appointment(appointment_id)
        lifecycle.ensure_can_complete(ap, now)
        return self._set_status(ap, AppointmentStatus.COMPLETED)

    def complete_elapsed(
        self, now: datetime | None = None, professional_id: int | None = None
    ) -> list[int]:
        """Marks every confirmed appointment whose end has passed as completed."""
        now = self._now(now)
        candidates = self.repo.list_appointments(
            professional_id, end=now, statuses=[AppointmentStatus.CONFIRMED]
        )
        done: list[int] = []
        for ap in candidates:
            if lifecycle.has_elapsed(ap, now):
                self._set_status(ap, AppointmentStatus.COMPLETED)
                done.append(ap.id)
        return done

    # ---------- time windows ----------

    def confirmation_status(
        self, appointment_id: int, now: datetime | None = None
    ) -> ConfirmationDecision:
        ap = self._get_appointment(appointment_id)
        return self.policies.confirmation.evaluate(ap, self._now(now))

    def join_status(self, appointment_id: int, now: datetime | None = None) -> JoinStatus:
        ap = self._get_appointment(appointment_id)
        if ap.status == AppointmentStatus.CANCELLED:
            raise InvalidTransitionError("La cita fue cancelada")
        return self.policies.join.evaluate(ap, self._now(now))

    def survey_status(self, appointment_id: int, now: datetime | None = None) -> SurveyStatus:
        ap = self._get_appointment(appointment_id)
        return self.policies.survey.evaluate(ap, self._now(now), self.repo.has_survey(ap.id))

    def record_survey(
        self,
        appointment_id: int,
        patient_id: int,
        ratings: Mapping[str, int],
        what_you_valued: str | None = None,
        what_to_improve: str | None = None,
        now: datetime | None = None,
    ):
        ap = self._get_appointment(appointment_id)
        if ap.patient_id != patient_id:
            raise InvalidInputError("La cita no pertenece a este paciente")

        missing = [f for f in RATING_FIELDS if f not in ratings]
        if missing:
            raise InvalidInputError(f"Faltan calificaciones: {', '.join(missing)}")
        bad = [f for f in RATING_FIELDS if not 1 <= int(ratings[f]) <= 5]
        if bad:
            raise InvalidInputError(f"Calificaciones fuera de rango (1-5): {', '.join(bad)}")

        status = self.policies.survey.evaluate(ap, self._now(now), self.repo.has_survey(ap.id))
        if status.has_rated:
            raise WindowClosedError("Esta cita ya fue calificada")
        if not status.can_rate:
            raise WindowClosedError("La encuesta no está disponible para esta cita")

        survey = self.repo.create_survey(
            appointment_id=ap.id,
            patient_id=ap.patient_id,
            professional_id=ap.professional_id,
            what_you_valued=what_you_valued,
            what_to_improve=what_to_improve,
            **{f: int(ratings[f]) for f in RATING_FIELDS},
        )
        log.info("survey.recorded", appointment_id=ap.id, survey_id=survey.id)
        return survey

    # ---------- plan renewal ----------

    def renewal_status(self, professional_id: int, now: datetime | None = None) -> RenewalDecision:
        prof = self._get_professional(professional_id)
        return self.policies.renewal.evaluate(prof.plan_expires_at, self._now(now))

    def renew_plan(self, professional_id: int, now: datetime | None = None) -> Professional:
        now = self._now(now)
        prof = self._get_professional(professional_id)
        decision = self.policies.renewal.evaluate(prof.plan_expires_at, now)
        if not decision.can_renew:
            log.info(
                "plan.renewal_rejected",
                professional_id=prof.id,
                days_until_renewal=decision.days_until_renewal,
            )
            raise RenewalNotOpenError(decision.message, decision.days_until_renewal or 0)

        new_expiry = self.policies.renewal.next_expiration(prof.plan_expires_at, now)
        prof = self.repo.update_plan_expiration(prof, new_expiry)
        log.info("plan.renewed", professional_id=prof.id, plan_expires_at=new_expiry.isoformat())
        return prof
