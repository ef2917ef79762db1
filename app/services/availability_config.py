"""
Configuration of a professional's availability: weekly rules, date
overrides and blocked intervals. Everything is validated at creation time
so the resolver only ever sees well-formed windows.
"""

from __future__ import annotations

from datetime import date, datetime, time

from app.core.errors import InvalidInputError, NotFoundError
from app.core.logging import get_logger
from app.models.availability import DateOverride, WeeklyRule
from app.models.blocked_slot import BlockedInterval
from app.models.professional import Professional
from app.repositories.scheduling import SchedulingRepository
from app.scheduling.availability import Window, windows_overlap
from app.scheduling.clock import LocalTime, parse_date
from app.utils.tz import ensure_aware_utc

log = get_logger()


def _ensure_professional(repo: SchedulingRepository, professional_id: int) -> Professional:
    p = repo.get_professional(professional_id)
    if not p:
        raise NotFoundError("Profesional no encontrado")
    if not p.is_active:
        raise InvalidInputError("Profesional inactivo")
    return p


def _check_no_overlap(existing: list[Window], new: Window, where: str) -> None:
    for w in existing:
        if windows_overlap(w, new):
            raise InvalidInputError(
                f"Superposición con una ventana existente ({where} {w.start}-{w.end})"
            )


# ---------- weekly rules ----------


def list_weekly_rules(repo: SchedulingRepository, professional_id: int) -> list[WeeklyRule]:
    _ensure_professional(repo, professional_id)
    return repo.list_weekly_rules(professional_id)


def add_weekly_rule(
    repo: SchedulingRepository,
    professional_id: int,
    weekday: int,
    start: str | time | LocalTime,
    end: str | time | LocalTime,
) -> WeeklyRule:
    """weekday: 0=Sunday .. 6=Saturday; end "00:00" means end of day."""
    if not 0 <= weekday <= 6:
        raise InvalidInputError(f"Día de la semana inválido: {weekday}")
    _ensure_professional(repo, professional_id)

    new = Window.from_times(start, end)
    existing = [
        Window.from_times(r.start_time, r.end_time)
        for r in repo.list_weekly_rules(professional_id, weekday)
    ]
    _check_no_overlap(existing, new, f"día {weekday}")

    row = repo.add(
        WeeklyRule(
            professional_id=professional_id,
            weekday=weekday,
            start_time=LocalTime.parse(start).to_time(),
            end_time=LocalTime.parse(end).to_time(),
        )
    )
    log.info("availability.rule_created", professional_id=professional_id, rule_id=row.id, weekday=weekday)
    return row


def delete_weekly_rule(repo: SchedulingRepository, rule_id: int) -> None:
    row = repo.get(WeeklyRule, rule_id)
    if not row:
        raise NotFoundError("Regla semanal no encontrada")
    repo.delete(row)
    log.info("availability.rule_deleted", rule_id=rule_id)


# ---------- date overrides ----------


def list_overrides(
    repo: SchedulingRepository,
    professional_id: int,
    first: str | date | None = None,
    last: str | date | None = None,
) -> list[DateOverride]:
    _ensure_professional(repo, professional_id)
    return repo.list_overrides(
        professional_id,
        parse_date(first) if first else None,
        parse_date(last) if last else None,
    )


def add_override(
    repo: SchedulingRepository,
    professional_id: int,
    for_date: str | date,
    start: str | time | LocalTime,
    end: str | time | LocalTime,
    is_available: bool = True,
) -> DateOverride:
    d = parse_date(for_date)
    _ensure_professional(repo, professional_id)

    new = Window.from_times(start, end)
    existing = [
        Window.from_times(o.start_time, o.end_time)
        for o in repo.list_overrides(professional_id, d, d)
    ]
    _check_no_overlap(existing, new, d.isoformat())

    row = repo.add(
        DateOverride(
            professional_id=professional_id,
            for_date=d,
            start_time=LocalTime.parse(start).to_time(),
            end_time=LocalTime.parse(end).to_time(),
            is_available=is_available,
        )
    )
    log.info(
        "availability.override_created",
        professional_id=professional_id,
        override_id=row.id,
        date=d.isoformat(),
        is_available=is_available,
    )
    return row


def delete_override(repo: SchedulingRepository, override_id: int) -> None:
    row = repo.get(DateOverride, override_id)
    if not row:
        raise NotFoundError("Excepción de fecha no encontrada")
    repo.delete(row)
    log.info("availability.override_deleted", override_id=override_id)


# ---------- blocked intervals ----------


def list_blocks(
    repo: SchedulingRepository,
    professional_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[BlockedInterval]:
    _ensure_professional(repo, professional_id)
    return repo.list_blocked_intervals(professional_id, start, end)


def add_block(
    repo: SchedulingRepository,
    professional_id: int,
    starts_at: datetime,
    ends_at: datetime,
    reason: str | None = None,
) -> BlockedInterval:
    try:
        starts_at = ensure_aware_utc(starts_at)
        ends_at = ensure_aware_utc(ends_at)
    except ValueError as exc:
        raise InvalidInputError("Las fechas del bloqueo deben incluir zona horaria") from exc
    if ends_at <= starts_at:
        raise InvalidInputError("El término del bloqueo debe ser posterior al inicio")
    _ensure_professional(repo, professional_id)

    row = repo.add(
        BlockedInterval(
            professional_id=professional_id,
            starts_at=starts_at,
            ends_at=ends_at,
            reason=reason,
        )
    )
    log.info("availability.block_created", professional_id=professional_id, block_id=row.id)
    return row


def delete_block(repo: SchedulingRepository, block_id: int) -> None:
    row = repo.get(BlockedInterval, block_id)
    if not row:
        raise NotFoundError("Bloqueo no encontrado")
    repo.delete(row)
    log.info("availability.block_deleted", block_id=block_id)
