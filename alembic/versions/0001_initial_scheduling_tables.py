"""initial scheduling tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

INDEX_NAME = "ux_appt_prof_start_active"
ACTIVE = sa.text("status IN ('pending_confirmation', 'confirmed')")

RATING_FIELDS = (
    "professional_empathy_rating",
    "professional_punctuality_rating",
    "professional_satisfaction_rating",
    "platform_booking_rating",
    "platform_payment_rating",
    "platform_experience_rating",
)


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    # 1) professionals
    op.create_table(
        "professionals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("speciality", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("plan_expires_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )

    # 2) weekly rules / date overrides (clinic wall-clock times)
    op.create_table(
        "availability_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "professional_id",
            sa.Integer(),
            sa.ForeignKey("professionals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        _ts("created_at"),
        sa.CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_rule_weekday"),
    )
    op.create_index(
        "ix_rule_professional_weekday", "availability_rules", ["professional_id", "weekday"]
    )

    op.create_table(
        "availability_overrides",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "professional_id",
            sa.Integer(),
            sa.ForeignKey("professionals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("for_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
    )
    op.create_index(
        "ix_override_professional_date",
        "availability_overrides",
        ["professional_id", "for_date"],
    )

    # 3) blocked intervals (absolute instants)
    op.create_table(
        "blocked_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "professional_id",
            sa.Integer(),
            sa.ForeignKey("professionals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _ts("starts_at"),
        _ts("ends_at"),
        sa.Column("reason", sa.String(length=200), nullable=True),
        _ts("created_at"),
        sa.CheckConstraint("ends_at > starts_at", name="ck_block_time_order"),
    )
    op.create_index(
        "ix_block_professional_starts", "blocked_slots", ["professional_id", "starts_at"]
    )

    # 4) appointments
    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "professional_id",
            sa.Integer(),
            sa.ForeignKey("professionals.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        _ts("scheduled_at"),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="55"),
        sa.Column(
            "status",
            sa.Enum(
                "pending_confirmation",
                "confirmed",
                "completed",
                "cancelled",
                name="appointment_status_enum",
            ),
            nullable=False,
        ),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_appt_duration"),
    )
    op.create_index("ix_appt_patient_id", "appointments", ["patient_id"])
    # one active booking per (professional, start instant)
    op.create_index(
        INDEX_NAME,
        "appointments",
        ["professional_id", "scheduled_at"],
        unique=True,
        postgresql_where=ACTIVE,
        sqlite_where=ACTIVE,
    )

    # 5) satisfaction surveys
    op.create_table(
        "satisfaction_surveys",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "appointment_id",
            sa.Integer(),
            sa.ForeignKey("appointments.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("professional_id", sa.Integer(), nullable=False),
        *[sa.Column(f, sa.Integer(), nullable=False) for f in RATING_FIELDS],
        sa.Column("what_you_valued", sa.String(length=1000), nullable=True),
        sa.Column("what_to_improve", sa.String(length=1000), nullable=True),
        _ts("created_at"),
        *[
            sa.CheckConstraint(f"{f} BETWEEN 1 AND 5", name=f"ck_survey_{f}")
            for f in RATING_FIELDS
        ],
    )


def downgrade() -> None:
    op.drop_table("satisfaction_surveys")
    op.drop_index(INDEX_NAME, table_name="appointments")
    op.drop_index("ix_appt_patient_id", table_name="appointments")
    op.drop_table("appointments")
    sa.Enum(name="appointment_status_enum").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_block_professional_starts", table_name="blocked_slots")
    op.drop_table("blocked_slots")
    op.drop_index("ix_override_professional_date", table_name="availability_overrides")
    op.drop_table("availability_overrides")
    op.drop_index("ix_rule_professional_weekday", table_name="availability_rules")
    op.drop_table("availability_rules")
    op.drop_table("professionals")
