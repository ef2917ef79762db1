from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from app.deps import get_repository
from app.repositories.scheduling import SchedulingRepository
from app.schemas.availability import (
    BlockIn,
    BlockOut,
    DateOverrideIn,
    DateOverrideOut,
    WeeklyRuleIn,
    WeeklyRuleOut,
)
from app.services import availability_config as cfg

router = APIRouter(prefix="/availability", tags=["availability"])


# ---------- weekly rules ----------


@router.get("/rules", response_model=list[WeeklyRuleOut])
def list_rules(
    professional_id: int = Query(..., ge=1),
    repo: SchedulingRepository = Depends(get_repository),
):
    return [WeeklyRuleOut.from_row(r) for r in cfg.list_weekly_rules(repo, professional_id)]


@router.post("/rules", response_model=WeeklyRuleOut, status_code=status.HTTP_201_CREATED)
def create_rule(payload: WeeklyRuleIn, repo: SchedulingRepository = Depends(get_repository)):
    row = cfg.add_weekly_rule(
        repo, payload.professional_id, payload.weekday, payload.start, payload.end
    )
    return WeeklyRuleOut.from_row(row)


@router.delete("/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rule(rule_id: int, repo: SchedulingRepository = Depends(get_repository)):
    cfg.delete_weekly_rule(repo, rule_id)


# ---------- date overrides ----------


@router.get("/overrides", response_model=list[DateOverrideOut])
def list_overrides(
    professional_id: int = Query(..., ge=1),
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    repo: SchedulingRepository = Depends(get_repository),
):
    rows = cfg.list_overrides(repo, professional_id, date_from, date_to)
    return [DateOverrideOut.from_row(r) for r in rows]


@router.post("/overrides", response_model=DateOverrideOut, status_code=status.HTTP_201_CREATED)
def create_override(
    payload: DateOverrideIn, repo: SchedulingRepository = Depends(get_repository)
):
    row = cfg.add_override(
        repo,
        payload.professional_id,
        payload.for_date,
        payload.start,
        payload.end,
        payload.is_available,
    )
    return DateOverrideOut.from_row(row)


@router.delete("/overrides/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_override(override_id: int, repo: SchedulingRepository = Depends(get_repository)):
    cfg.delete_override(repo, override_id)


# ---------- blocked intervals ----------


@router.get("/blocks", response_model=list[BlockOut])
def list_blocks(
    professional_id: int = Query(..., ge=1),
    repo: SchedulingRepository = Depends(get_repository),
):
    return [BlockOut.model_validate(b) for b in cfg.list_blocks(repo, professional_id)]


@router.post("/blocks", response_model=BlockOut, status_code=status.HTTP_201_CREATED)
def create_block(payload: BlockIn, repo: SchedulingRepository = Depends(get_repository)):
    row = cfg.add_block(
        repo, payload.professional_id, payload.starts_at, payload.ends_at, payload.reason
    )
    return BlockOut.model_validate(row)


@router.delete("/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(block_id: int, repo: SchedulingRepository = Depends(get_repository)):
    cfg.delete_block(repo, block_id)
