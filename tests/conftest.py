import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from datetime import UTC, date, datetime, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Import all models to ensure their tables are created
import app.db.base  # noqa: F401
from app.core.settings import Settings
from app.db.base_class import Base
from app.models.appointment import Appointment, AppointmentStatus
from app.models.availability import WeeklyRule
from app.models.professional import Professional
from app.repositories.scheduling import SqlSchedulingRepository
from app.scheduling.policies import build_policies
from app.services.scheduling_service import SchedulingService
from app.utils.tz import combine_local_to_utc

# Sunday 2025-06-01 08:00 in Santiago (UTC-4, no DST in June)
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
MONDAY = date(2025, 6, 2)


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def TestingSessionLocal(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def override_get_db(TestingSessionLocal):
    """Override the database dependency to use our test database."""

    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    return _override_get_db


@pytest.fixture
def db_session(TestingSessionLocal):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None)


@pytest.fixture
def policies(test_settings):
    return build_policies(test_settings)


@pytest.fixture
def repo(db_session):
    return SqlSchedulingRepository(db_session)


@pytest.fixture
def service(repo, policies):
    return SchedulingService(repo, policies, clock=lambda: NOW)


@pytest.fixture
def client(override_get_db, policies):
    """Test client with the database and the clock overridden."""
    from fastapi.testclient import TestClient

    from app.db import get_db
    from app.deps import get_clock, get_policies
    from app.main import app

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    app.dependency_overrides[get_policies] = lambda: policies

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def test_professional(db_session):
    professional = Professional(name="Dra. Prueba", speciality="Psicología", is_active=True)
    db_session.add(professional)
    db_session.commit()
    db_session.refresh(professional)
    return professional


@pytest.fixture
def monday_rule(db_session, test_professional):
    """Monday 09:00-12:00."""
    rule = WeeklyRule(
        professional_id=test_professional.id,
        weekday=1,
        start_time=time(9, 0),
        end_time=time(12, 0),
    )
    db_session.add(rule)
    db_session.commit()
    db_session.refresh(rule)
    return rule


@pytest.fixture
def make_appointment(db_session, policies):
    """Inserts an appointment at a clinic-local date/time."""

    def _make(
        professional,
        d: date,
        t: time,
        status: AppointmentStatus = AppointmentStatus.CONFIRMED,
        duration_minutes: int = 55,
        patient_id: int = 1,
    ) -> Appointment:
        ap = Appointment(
            professional_id=professional.id,
            patient_id=patient_id,
            scheduled_at=combine_local_to_utc(d, t, policies.tz),
            duration_minutes=duration_minutes,
            status=status,
        )
        db_session.add(ap)
        db_session.commit()
        db_session.refresh(ap)
        return ap

    return _make


def at(d: date, hh: int, mm: int = 0) -> datetime:
    """Clinic-local wall clock -> aware UTC instant."""
    return combine_local_to_utc(d, time(hh, mm))


