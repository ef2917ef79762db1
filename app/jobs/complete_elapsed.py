"""
Batch job: marks confirmed appointments whose session already ended as
completed. Meant to run periodically (cron / scheduler):

    python -m app.jobs.complete_elapsed
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.orm import configure_mappers

import app.db.base  # noqa: F401
from app.core.logging import configure_logging, get_logger
from app.core.settings import settings
from app.db.session import SessionLocal
from app.repositories.scheduling import SqlSchedulingRepository
from app.scheduling.policies import build_policies
from app.services.scheduling_service import SchedulingService

configure_mappers()


def run(now: datetime | None = None, session_factory=SessionLocal) -> list[int]:
    now = now or datetime.now(UTC)
    with session_factory() as db:
        svc = SchedulingService(SqlSchedulingRepository(db), build_policies())
        done = svc.complete_elapsed(now)

    get_logger().info("job.complete_elapsed", now=now.isoformat(), completed=len(done), ids=done)
    return done


def main() -> None:
    configure_logging(json=settings.LOG_JSON, level=settings.LOG_LEVEL)
    run()


if __name__ == "__main__":
    main()
