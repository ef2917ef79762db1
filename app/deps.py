from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.repositories.scheduling import SchedulingRepository, SqlSchedulingRepository
from app.scheduling.policies import SchedulingPolicies, build_policies
from app.services.scheduling_service import SchedulingService, utc_now


def get_repository(db: Session = Depends(get_db)) -> SchedulingRepository:  # noqa: B008
    return SqlSchedulingRepository(db)


@lru_cache
def get_policies() -> SchedulingPolicies:
    return build_policies()


def get_clock() -> Callable[[], datetime]:
    # tests override this to freeze "now"
    return utc_now


def get_scheduling_service(
    repo: SchedulingRepository = Depends(get_repository),  # noqa: B008
    policies: SchedulingPolicies = Depends(get_policies),  # noqa: B008
    clock: Callable[[], datetime] = Depends(get_clock),  # noqa: B008
) -> SchedulingService:
    return SchedulingService(repo, policies, clock)
