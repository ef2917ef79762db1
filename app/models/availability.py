from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.db.types import AwareDateTime


class WeeklyRule(Base):
    """
    Recurring weekly window, in clinic wall-clock time.
    weekday: 0=Sunday ... 6=Saturday. end_time 00:00 means end of day.
    """

    __tablename__ = "availability_rules"
    __table_args__ = (
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_rule_weekday"),
        Index("ix_rule_professional_weekday", "professional_id", "weekday"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    professional_id: Mapped[int] = mapped_column(
        ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False
    )
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time(), nullable=False)

    created_at: Mapped[dt.datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )


class DateOverride(Base):
    """
    Date-specific window. Any override on a date replaces the weekly rules
    of that date; is_available=False windows mark the date as closed.
    """

    __tablename__ = "availability_overrides"
    __table_args__ = (Index("ix_override_professional_date", "professional_id", "for_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    professional_id: Mapped[int] = mapped_column(
        ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False
    )
    for_date: Mapped[dt.date] = mapped_column(Date(), nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time(), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )
