from __future__ import annotations

import datetime as dt

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.db.types import AwareDateTime


class BlockedInterval(Base):
    """Absolute [starts_at, ends_at) range where the professional is unavailable."""

    __tablename__ = "blocked_slots"
    __table_args__ = (
        CheckConstraint("ends_at > starts_at", name="ck_block_time_order"),
        Index("ix_block_professional_starts", "professional_id", "starts_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    professional_id: Mapped[int] = mapped_column(
        ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False
    )
    starts_at: Mapped[dt.datetime] = mapped_column(AwareDateTime(), nullable=False)
    ends_at: Mapped[dt.datetime] = mapped_column(AwareDateTime(), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(200))

    created_at: Mapped[dt.datetime] = mapped_column(
        AwareDateTime(),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )
