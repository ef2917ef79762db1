from __future__ import annotations

import datetime as dt

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.db.types import AwareDateTime

RATING_FIELDS = (
    "professional_empathy_rating",
    "professional_punctuality_rating",
    "professional_satisfaction_rating",
    "platform_booking_rating",
    "platform_payment_rating",
    "platform_experience_rating",
)


class SatisfactionSurvey(Base):
    __tablename__ = "satisfaction_surveys"
    __table_args__ = tuple(
        CheckConstraint(f"{f} BETWEEN 1 AND 5", name=f"ck_survey_{f}")
        for f in RATING_FIELDS
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # one survey per appointment
    appointment_id: Mapped[int] = mapped_column(
        ForeignKey("appointments.id", ondelete="RESTRICT"), nullable=False, unique=True
    )
    patient_id: Mapped[int] = mapped_column(Integer, nullable=False)
    professional_id: Mapped[int] = mapped_column(Integer, nullable=False)

    professional_empathy_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    professional_punctuality_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    professional_satisfaction_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_booking_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_payment_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_experience_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    what_you_valued: Mapped[str | None] = mapped_column(String(1000))
    what_to_improve: Mapped[str | None] = mapped_column(String(1000))

    created_at: Mapped[dt.datetime] = mapped_column(
        AwareDateTime(),
        nullable=False,
        default=lambda: dt.datetime.now(tz=dt.UTC),
    )
