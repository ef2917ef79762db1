from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from app.core.settings import ConflictMode, Settings, settings
from app.scheduling.horizon import DateHorizonPolicy
from app.scheduling.windows import (
    ConfirmationWindow,
    MeetingJoinWindow,
    PlanRenewalWindow,
    SurveyWindow,
)
from app.utils.tz import clinic_tz


@dataclass(frozen=True)
class SchedulingPolicies:
    tz: ZoneInfo
    horizon: DateHorizonPolicy
    confirmation: ConfirmationWindow
    join: MeetingJoinWindow
    survey: SurveyWindow
    renewal: PlanRenewalWindow
    slot_minutes: int = 60
    default_duration_minutes: int = 55
    conflict_mode: ConflictMode = ConflictMode.START


def build_policies(cfg: Settings | None = None) -> SchedulingPolicies:
    """Every threshold comes from settings once, here."""
    cfg = cfg or settings
    tz = clinic_tz(cfg.CLINIC_TZ)
    return SchedulingPolicies(
        tz=tz,
        horizon=DateHorizonPolicy(tz=tz, days=cfg.BOOKING_HORIZON_DAYS),
        confirmation=ConfirmationWindow(hours_before=cfg.CONFIRMATION_HOURS_BEFORE),
        join=MeetingJoinWindow(grace_minutes=cfg.JOIN_GRACE_MINUTES),
        survey=SurveyWindow(days=cfg.SURVEY_WINDOW_DAYS),
        renewal=PlanRenewalWindow(
            days_before=cfg.PLAN_RENEWAL_DAYS_BEFORE, period_days=cfg.PLAN_PERIOD_DAYS
        ),
        slot_minutes=cfg.SLOT_MINUTES,
        default_duration_minutes=cfg.DEFAULT_APPOINTMENT_MINUTES,
        conflict_mode=cfg.BOOKING_CONFLICT_MODE,
    )
