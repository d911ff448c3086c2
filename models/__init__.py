"""
Data models and Pydantic schemas for the timetable API.
"""
from .schemas import (
    DAYS,
    THEORY,
    PRACTICAL,
    BUSY,
    Period,
    PeriodInput,
    PeriodPatch,
    Faculty,
    Subject,
    TimeSlot,
    ClassDetails,
    Schedule,
    ScheduleCreate,
    PlacementRequest,
    PlacementResult,
    SubjectUsage,
    ConflictInfo,
    ErrorMessage,
    Messages,
    RemovedSession,
    PeriodEditResult,
    CellView,
    FacultyEntry,
    FacultyTimetable
)

__all__ = [
    "DAYS",
    "THEORY",
    "PRACTICAL",
    "BUSY",
    "Period",
    "PeriodInput",
    "PeriodPatch",
    "Faculty",
    "Subject",
    "TimeSlot",
    "ClassDetails",
    "Schedule",
    "ScheduleCreate",
    "PlacementRequest",
    "PlacementResult",
    "SubjectUsage",
    "ConflictInfo",
    "ErrorMessage",
    "Messages",
    "RemovedSession",
    "PeriodEditResult",
    "CellView",
    "FacultyEntry",
    "FacultyTimetable"
]
