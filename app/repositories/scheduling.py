"""Read/write access to the scheduling records of a professional."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import date, datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import RepositoryError, SlotConflictError, WindowClosedError
from app.core.logging import get_logger
from app.models.appointment import Appointment, AppointmentStatus
from app.models.availability import DateOverride, WeeklyRule
from app.models.blocked_slot import BlockedInterval
from app.models.professional import Professional
from app.models.satisfaction_survey import SatisfactionSurvey

log = get_logger()


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    return (
        "ux_appt_prof_start_active" in str(orig)
        or "unique" in str(orig).lower()
        or getattr(orig, "pgcode", None) == "23505"
    )


class SchedulingRepository(Protocol):
    def list_weekly_rules(
        self, professional_id: int, weekday: int | None = None
    ) -> list[WeeklyRule]: ...

    def list_overrides(
        self, professional_id: int, first: date | None = None, last: date | None = None
    ) -> list[DateOverride]: ...

    def list_blocked_intervals(
        self,
        professional_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[BlockedInterval]: ...

    def list_appointments(
        self,
        professional_id: int | None,
        start: datetime | None = None,
        end: datetime | None = None,
        statuses: Iterable[AppointmentStatus] | None = None,
    ) -> list[Appointment]: ...

    def get_appointment(self, appointment_id: int) -> Appointment | None: ...

    def get_professional(self, professional_id: int) -> Professional | None: ...

    def create_appointment(
        self,
        *,
        professional_id: int,
        patient_id: int,
        scheduled_at: datetime,
        duration_minutes: int,
        status: AppointmentStatus,
    ) -> Appointment: ...

    def update_appointment_status(
        self, appointment: Appointment, status: AppointmentStatus
    ) -> Appointment: ...

    def has_survey(self, appointment_id: int) -> bool: ...

    def create_survey(self, **fields) -> SatisfactionSurvey: ...

    def update_plan_expiration(
        self, professional: Professional, expires_at: datetime
    ) -> Professional: ...

    def add(self, obj): ...

    def add_all(self, objs: Sequence) -> list: ...

    def delete(self, obj) -> None: ...

    def get(self, model, pk: int): ...


class SqlSchedulingRepository:
    """SQLAlchemy-backed repository. Every write commits its own transaction."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _store_errors(self, op: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("repository.error", op=op, error=str(exc))
            raise RepositoryError(f"Error de almacenamiento en {op}") from exc

    # ---------- reads ----------

    def list_weekly_rules(
        self, professional_id: int, weekday: int | None = None
    ) -> list[WeeklyRule]:
        stmt = select(WeeklyRule).where(WeeklyRule.professional_id == professional_id)
        if weekday is not None:
            stmt = stmt.where(WeeklyRule.weekday == weekday)
        stmt = stmt.order_by(WeeklyRule.weekday.asc(), WeeklyRule.start_time.asc())
        with self._store_errors("list_weekly_rules"):
            return list(self.db.scalars(stmt))

    def list_overrides(
        self, professional_id: int, first: date | None = None, last: date | None = None
    ) -> list[DateOverride]:
        stmt = select(DateOverride).where(DateOverride.professional_id == professional_id)
        if first is not None:
            stmt = stmt.where(DateOverride.for_date >= first)
        if last is not None:
            stmt = stmt.where(DateOverride.for_date <= last)
        stmt = stmt.order_by(DateOverride.for_date.asc(), DateOverride.start_time.asc())
        with self._store_errors("list_overrides"):
            return list(self.db.scalars(stmt))

    def list_blocked_intervals(
        self,
        professional_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[BlockedInterval]:
        """Blocks intersecting [start, end) when bounds are given."""
        stmt = select(BlockedInterval).where(
            BlockedInterval.professional_id == professional_id
        )
        if end is not None:
            stmt = stmt.where(BlockedInterval.starts_at < end)
        if start is not None:
            stmt = stmt.where(BlockedInterval.ends_at > start)
        stmt = stmt.order_by(BlockedInterval.starts_at.asc())
        with self._store_errors("list_blocked_intervals"):
            return list(self.db.scalars(stmt))

    def list_appointments(
        self,
        professional_id: int | None,
        start: datetime | None = None,
        end: datetime | None = None,
        statuses: Iterable[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        """Appointments whose start falls in [start, end)."""
        stmt = select(Appointment)
        if professional_id is not None:
            stmt = stmt.where(Appointment.professional_id == professional_id)
        if start is not None:
            stmt = stmt.where(Appointment.scheduled_at >= start)
        if end is not None:
            stmt = stmt.where(Appointment.scheduled_at < end)
        if statuses is not None:
            stmt = stmt.where(Appointment.status.in_(list(statuses)))
        stmt = stmt.order_by(Appointment.scheduled_at.asc())
        with self._store_errors("list_appointments"):
            return list(self.db.scalars(stmt))

    def get_appointment(self, appointment_id: int) -> Appointment | None:
        with self._store_errors("get_appointment"):
            return self.db.get(Appointment, appointment_id)

    def get_professional(self, professional_id: int) -> Professional | None:
        with self._store_errors("get_professional"):
            return self.db.get(Professional, professional_id)

    def has_survey(self, appointment_id: int) -> bool:
        stmt = select(SatisfactionSurvey.id).where(
            SatisfactionSurvey.appointment_id == appointment_id
        )
        with self._store_errors("has_survey"):
            return self.db.scalars(stmt).first() is not None

    # ---------- writes ----------

    def create_appointment(
        self,
        *,
        professional_id: int,
        patient_id: int,
        scheduled_at: datetime,
        duration_minutes: int,
        status: AppointmentStatus,
    ) -> Appointment:
        """
        Inserts the booking. The partial unique index on
        (professional_id, scheduled_at) for active statuses is the
        serialization point: a concurrent winner turns this into a conflict.
        """
        ap = Appointment(
            professional_id=professional_id,
            patient_id=patient_id,
            scheduled_at=scheduled_at,
            duration_minutes=duration_minutes,
            status=status,
        )
        self.db.add(ap)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if _is_unique_violation(exc):
                raise SlotConflictError(
                    "El horario acaba de ser reservado por otra persona. "
                    "Actualiza los horarios y elige otro."
                ) from exc
            raise RepositoryError("Error de almacenamiento en create_appointment") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("repository.error", op="create_appointment", error=str(exc))
            raise RepositoryError("Error de almacenamiento en create_appointment") from exc
        self.db.refresh(ap)
        return ap

    def update_appointment_status(
        self, appointment: Appointment, status: AppointmentStatus
    ) -> Appointment:
        appointment.status = status
        with self._store_errors("update_appointment_status"):
            self.db.commit()
            self.db.refresh(appointment)
        return appointment

    def create_survey(self, **fields) -> SatisfactionSurvey:
        survey = SatisfactionSurvey(**fields)
        self.db.add(survey)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise WindowClosedError("Esta cita ya fue calificada") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Error de almacenamiento en create_survey") from exc
        self.db.refresh(survey)
        return survey

    def update_plan_expiration(
        self, professional: Professional, expires_at: datetime
    ) -> Professional:
        professional.plan_expires_at = expires_at
        with self._store_errors("update_plan_expiration"):
            self.db.commit()
            self.db.refresh(professional)
        return professional

    def add(self, obj):
        self.db.add(obj)
        with self._store_errors(f"add_{type(obj).__name__}"):
            self.db.commit()
            self.db.refresh(obj)
        return obj

    def add_all(self, objs: Sequence) -> list:
        self.db.add_all(objs)
        with self._store_errors("add_all"):
            self.db.commit()
            for obj in objs:
                self.db.refresh(obj)
        return list(objs)

    def delete(self, obj) -> None:
        self.db.delete(obj)
        with self._store_errors(f"delete_{type(obj).__name__}"):
            self.db.commit()

    def get(self, model, pk: int):
        with self._store_errors(f"get_{model.__name__}"):
            return self.db.get(model, pk)
