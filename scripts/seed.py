# scripts/seed.py
"""
Development seed: a few professionals with weekday hours, one lunch-break
override and a blocked hour. Idempotent by professional name.

    python -m scripts.seed
"""

from __future__ import annotations

import os
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import select

import app.db.base  # noqa: F401
from app.core.logging import configure_logging, get_logger
from app.db.base_class import Base
from app.db.session import SessionLocal, engine
from app.models.professional import Professional
from app.repositories.scheduling import SqlSchedulingRepository
from app.services import availability_config as cfg
from app.utils.tz import clinic_tz, combine_local_to_utc

SEED_CREATE_ALL = os.getenv("SEED_CREATE_ALL", "false").lower() == "true"

PROFESSIONALS_DATA = [
    {"name": "Dra. Ana Soto", "speciality": "Psicología clínica"},
    {"name": "Dr. Bruno Lagos", "speciality": "Fonoaudiología"},
    {"name": "Dra. Carla Díaz", "speciality": "Terapia ocupacional"},
]

# Monday..Friday (0=Sunday), morning and afternoon
WEEK_HOURS = [(wd, "09:00", "13:00") for wd in range(1, 6)] + [
    (wd, "14:00", "18:00") for wd in range(1, 6)
]


def main() -> None:
    configure_logging(json=False, level="INFO")
    log = get_logger()
    if SEED_CREATE_ALL:
        Base.metadata.create_all(bind=engine)

    tz = clinic_tz()
    today = datetime.now(UTC).astimezone(tz).date()

    with SessionLocal() as db:
        repo = SqlSchedulingRepository(db)
        for data in PROFESSIONALS_DATA:
            prof = db.scalars(
                select(Professional).where(Professional.name == data["name"])
            ).first()
            if prof:
                log.info("seed.skip", professional=data["name"])
                continue

            prof = repo.add(Professional(**data, is_active=True))
            for wd, start, end in WEEK_HOURS:
                cfg.add_weekly_rule(repo, prof.id, wd, start, end)

            # next Wednesday only in the morning
            wed = today + timedelta(days=(2 - today.weekday()) % 7 or 7)
            cfg.add_override(repo, prof.id, wed, "09:00", "12:00")

            # tomorrow 10:00-11:00 blocked
            tomorrow: date = today + timedelta(days=1)
            cfg.add_block(
                repo,
                prof.id,
                combine_local_to_utc(tomorrow, datetime.min.time().replace(hour=10), tz),
                combine_local_to_utc(tomorrow, datetime.min.time().replace(hour=11), tz),
                reason="Reunión de equipo",
            )
            log.info("seed.created", professional=prof.name, professional_id=prof.id)


if __name__ == "__main__":
    main()
