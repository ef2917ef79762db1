# Registers every model on the same metadata (alembic / create_all)
from app.db.base_class import Base  # noqa
from app.models.appointment import Appointment  # noqa
from app.models.availability import DateOverride, WeeklyRule  # noqa
from app.models.blocked_slot import BlockedInterval  # noqa
from app.models.professional import Professional  # noqa
from app.models.satisfaction_survey import SatisfactionSurvey  # noqa
