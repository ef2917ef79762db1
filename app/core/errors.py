from __future__ import annotations


class SchedulingError(Exception):
    """Base for every error raised by the scheduling engine."""

    code = "scheduling_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(SchedulingError):
    code = "invalid_input"


class OutOfHorizonError(SchedulingError):
    """Date outside the bookable horizon. Queries turn it into an empty list."""

    code = "out_of_horizon"


class SlotConflictError(SchedulingError):
    code = "slot_conflict"


class InvalidTransitionError(SchedulingError):
    code = "invalid_transition"


class WindowClosedError(SchedulingError):
    code = "window_closed"


class RenewalNotOpenError(WindowClosedError):
    code = "renewal_not_open"

    def __init__(self, message: str, days_until_renewal: int):
        super().__init__(message)
        self.days_until_renewal = days_until_renewal


class NotFoundError(SchedulingError):
    code = "not_found"


class RepositoryError(SchedulingError):
    """I/O failure from the underlying store. Never retried here."""

    code = "repository_error"
