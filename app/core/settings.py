from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(str, Enum):
    DEV = "dev"
    HML = "hml"
    PROD = "prod"


class ConflictMode(str, Enum):
    # "start": only an identical start instant collides (legacy rule)
    # "overlap": any intersection of [start, start + duration) collides
    START = "start"
    OVERLAP = "overlap"


class Settings(BaseSettings):
    APP_ENV: Env = Env.DEV
    DEBUG: bool = False

    DATABASE_URL: str = "sqlite:///./agenda.db"
    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    # Clinic calendar
    CLINIC_TZ: str = "America/Santiago"
    SLOT_MINUTES: int = 60
    DEFAULT_APPOINTMENT_MINUTES: int = 55
    BOOKING_HORIZON_DAYS: int = 14
    BOOKING_CONFLICT_MODE: ConflictMode = ConflictMode.START

    # Time-gated actions
    CONFIRMATION_HOURS_BEFORE: int = 24
    JOIN_GRACE_MINUTES: int = 5
    SURVEY_WINDOW_DAYS: int = 7
    PLAN_RENEWAL_DAYS_BEFORE: int = 5
    PLAN_PERIOD_DAYS: int = 30

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# global instance
settings = Settings()
