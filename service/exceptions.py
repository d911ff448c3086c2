"""
Errors raised by the timetable core.

Every error is an input-validation rejection: it is raised before any state is
touched, so callers can surface it and keep the previous schedule as-is.
"""
from typing import Optional


class TimetableError(Exception):
    """Base class for all timetable core exceptions."""

    code = "TIMETABLE_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidSpan(TimetableError):
    """Raised when a session's duration cannot be laid out from its start period."""

    code = "INVALID_SPAN"
    status_code = 422


class EmptyAssignment(TimetableError):
    """Raised when a session is saved without a subject or without faculty."""

    code = "EMPTY_ASSIGNMENT"
    status_code = 422


class InvalidPeriod(TimetableError):
    """Raised when a period has bad times or would break table ordering."""

    code = "INVALID_PERIOD"
    status_code = 422


class UnknownReference(TimetableError):
    status_code = 404
    resource_type = "Resource"

    def __init__(self, resource_id, owner: Optional[str] = None):
        message = f"{self.resource_type} with id {resource_id} not found"
        if owner:
            message += f" in {owner}"
        super().__init__(message, details={"id": resource_id})
        self.resource_id = resource_id


class UnknownPeriod(UnknownReference):
    code = "UNKNOWN_PERIOD"
    resource_type = "Period"


class UnknownFaculty(UnknownReference):
    code = "UNKNOWN_FACULTY"
    resource_type = "Faculty"


class UnknownSubject(UnknownReference):
    code = "UNKNOWN_SUBJECT"
    resource_type = "Subject"


class UnknownSchedule(UnknownReference):
    code = "UNKNOWN_SCHEDULE"
    resource_type = "Schedule"
