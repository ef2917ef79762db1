from app.repositories.scheduling import SchedulingRepository, SqlSchedulingRepository

__all__ = ["SchedulingRepository", "SqlSchedulingRepository"]
