from __future__ import annotations

import datetime as dt
import enum

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base
from app.db.types import AwareDateTime


class AppointmentStatus(str, enum.Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# statuses that hold the slot
ACTIVE_STATUSES = (AppointmentStatus.PENDING_CONFIRMATION, AppointmentStatus.CONFIRMED)

_ACTIVE_SQL = text("status IN ('pending_confirmation', 'confirmed')")


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    professional_id: Mapped[int] = mapped_column(
        ForeignKey("professionals.id", ondelete="RESTRICT"), nullable=False
    )
    patient_id: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_at: Mapped[dt.datetime] = mapped_column(AwareDateTime(), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=55)
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            name="appointment_status_enum",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        default=AppointmentStatus.PENDING_CONFIRMATION,
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        AwareDateTime(),
        nullable=False,
        default=lambda: dt.datetime.now(tz=dt.UTC),
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        AwareDateTime(),
        nullable=False,
        default=lambda: dt.datetime.now(tz=dt.UTC),
        onupdate=lambda: dt.datetime.now(tz=dt.UTC),
    )

    professional = relationship("Professional")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_appt_duration"),
        # one active booking per (professional, start instant)
        Index(
            "ux_appt_prof_start_active",
            "professional_id",
            "scheduled_at",
            unique=True,
            postgresql_where=_ACTIVE_SQL,
            sqlite_where=_ACTIVE_SQL,
        ),
        Index("ix_appt_patient_id", "patient_id"),
    )

    @property
    def ends_at(self) -> dt.datetime:
        return self.scheduled_at + dt.timedelta(minutes=self.duration_minutes)
