from __future__ import annotations

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.errors import InvalidInputError
from app.core.settings import settings


def clinic_tz(name: str | None = None) -> ZoneInfo:
    """Resolve the clinic timezone (default: settings.CLINIC_TZ)."""
    key = name or settings.CLINIC_TZ
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidInputError(f"Zona horaria inválida: {key}") from exc


def ensure_aware_utc(dt: datetime) -> datetime:
    """
    Makes sure dt is timezone-aware and in UTC.
    - aware: converted to UTC.
    - naive: ValueError (avoids persisting a wrong instant).
    """
    if dt.tzinfo is None:
        raise ValueError("Naive datetime received. Always use aware datetimes.")
    return dt.astimezone(UTC)


def to_local(dt_utc: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Converts an aware datetime into the clinic timezone."""
    tz = tz or clinic_tz()
    if dt_utc.tzinfo is None:
        raise ValueError("Expected a timezone-aware datetime.")
    return dt_utc.astimezone(tz)


def combine_local_to_utc(d: date, t: time, tz: ZoneInfo | None = None) -> datetime:
    """
    Combines a date + wall-clock time read in the local TZ and returns the
    aware UTC instant.
    """
    tz = tz or clinic_tz()
    if t.tzinfo is not None:
        # drop any tzinfo carried by the time and use the target TZ
        t = time(t.hour, t.minute, t.second, t.microsecond)
    local_dt = datetime.combine(d, t).replace(tzinfo=tz)
    return local_dt.astimezone(UTC)


def local_today(now: datetime, tz: ZoneInfo | None = None) -> date:
    """Calendar date of `now` as seen on the clinic wall clock."""
    return to_local(now, tz).date()


def iso_utc(dt: datetime) -> str:
    """ISO 8601 in UTC with a 'Z' suffix."""
    return ensure_aware_utc(dt).isoformat().replace("+00:00", "Z")
