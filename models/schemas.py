import uuid
from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from service.time_utils import format_duration, format_range


Day = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
SessionType = Literal["Theory", "Practical", "Busy"]
Level = Literal["1st-year", "higher-year"]

DAYS: List[str] = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

THEORY = "Theory"
PRACTICAL = "Practical"
BUSY = "Busy"


def generate_id() -> str:
    return uuid.uuid4().hex[:9]


def now_millis() -> int:
    return int(datetime.now().timestamp() * 1000)


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ===========================
# Period Models
# ===========================

class Period(CamelModel):
    """A teaching slot or a break in the weekly grid"""
    id: int
    label: str
    start_minutes: int = Field(ge=0, lt=24 * 60)
    end_minutes: int = Field(gt=0, lt=24 * 60)
    is_break: bool = False

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_minutes <= self.start_minutes:
            raise ValueError("end_minutes must be after start_minutes")
        return self

    @computed_field
    @property
    def time(self) -> str:
        return format_range(self.start_minutes, self.end_minutes)

    @computed_field
    @property
    def duration_label(self) -> str:
        return format_duration(self.start_minutes, self.end_minutes)


class PeriodInput(CamelModel):
    """New period as entered in the editor; times are human strings"""
    label: str
    start_time: str  # "10:30", "1:30 PM", ...
    end_time: str
    is_break: bool = False


class PeriodPatch(CamelModel):
    label: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_break: Optional[bool] = None


# ===========================
# Faculty / Subject Models
# ===========================

def generate_initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part).upper()[:3]


class Faculty(CamelModel):
    id: str
    name: str
    initials: str = Field(default="", max_length=3)

    @model_validator(mode="after")
    def _default_initials(self):
        if not self.initials:
            self.initials = generate_initials(self.name)
        return self


class Subject(CamelModel):
    id: str
    name: str
    code: str = ""
    paper_code: str = ""
    theory_count: int = Field(default=0, ge=0)     # Total theory hours for the term
    practical_count: int = Field(default=0, ge=0)  # Total practical hours for the term
    color: Optional[str] = None


# ===========================
# Session / Schedule Models
# ===========================

class TimeSlot(CamelModel):
    """A placed session; `period` is the id of its starting period"""
    id: str = Field(default_factory=generate_id)
    day: Day
    period: int
    subject_id: str = ""  # Empty for Busy sessions
    faculty_ids: List[str] = []
    type: SessionType = THEORY
    duration: int = Field(default=1, ge=1)  # Non-break periods occupied

    @field_validator("faculty_ids")
    @classmethod
    def _dedupe_faculty(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))


class ClassDetails(CamelModel):
    class_name: str  # Department name
    section: str = ""
    session: str = ""
    semester: str = ""
    level: Optional[Level] = None  # Falls back to settings.default_level

    @property
    def label(self) -> str:
        return f"{self.class_name} | Sem {self.semester}"


def check_period_table(periods: List[Period]):
    """Ids unique and never the unsaved sentinel 0; starts in ascending order."""
    seen = set()
    previous = None
    for period in periods:
        if period.id == 0:
            raise ValueError(f"Period '{period.label}' has reserved id 0")
        if period.id in seen:
            raise ValueError(f"Duplicate period id {period.id}")
        seen.add(period.id)
        if previous is not None and period.start_minutes < previous.start_minutes:
            raise ValueError(f"Period '{period.label}' starts before '{previous.label}'")
        previous = period


def check_session_starts(time_slots: List[TimeSlot]):
    """At most one session starts at each (day, period); session ids unique."""
    starts = set()
    ids = set()
    for slot in time_slots:
        if (slot.day, slot.period) in starts:
            raise ValueError(f"More than one session starts at {slot.day} period {slot.period}")
        if slot.id in ids:
            raise ValueError(f"Duplicate session id {slot.id}")
        starts.add((slot.day, slot.period))
        ids.add(slot.id)


class Schedule(CamelModel):
    id: str = Field(default_factory=generate_id)
    details: ClassDetails
    subjects: List[Subject] = []
    faculties: List[Faculty] = []
    periods: List[Period] = []
    time_slots: List[TimeSlot] = []
    last_modified: int = Field(default_factory=now_millis)  # Epoch milliseconds

    @model_validator(mode="after")
    def _check_grid(self):
        check_period_table(self.periods)
        check_session_starts(self.time_slots)
        return self

    def find_subject(self, subject_id: str) -> Optional[Subject]:
        return next((s for s in self.subjects if s.id == subject_id), None)

    def find_faculty(self, faculty_id: str) -> Optional[Faculty]:
        return next((f for f in self.faculties if f.id == faculty_id), None)


class ScheduleCreate(CamelModel):
    details: ClassDetails
    subjects: List[Subject] = []
    faculties: List[Faculty] = []
    periods: List[Period] = []

    @model_validator(mode="after")
    def _check_periods(self):
        check_period_table(self.periods)
        return self


# ===========================
# Placement Models
# ===========================

class PlacementRequest(CamelModel):
    """Session to place; `id` is set when editing an existing session"""
    id: Optional[str] = None
    day: Day
    period: int
    subject_id: str = ""
    faculty_ids: List[str] = []
    type: SessionType = THEORY
    duration: int = Field(default=1, ge=1)


class SubjectUsage(CamelModel):
    subject_id: str
    used_theory: int = 0
    used_practical: int = 0
    theory_remaining: int = 0
    practical_remaining: int = 0
    is_theory_full: bool = False
    is_practical_full: bool = False

    def remaining(self, session_type: str) -> int:
        return self.theory_remaining if session_type == THEORY else self.practical_remaining

    def is_full(self, session_type: str) -> bool:
        return self.is_theory_full if session_type == THEORY else self.is_practical_full


class ConflictInfo(CamelModel):
    """Where a faculty member is already committed"""
    schedule_id: str
    label: str           # "<className> | Sem <semester>"
    semester: str = ""
    subject_name: str
    type: SessionType
    day: Day
    period_id: int
    faculty_id: str


class ErrorMessage(BaseModel):
    """Error or warning message"""
    title: str
    message: str


class Messages(BaseModel):
    """Collection of error/warning messages"""
    error_message: List[ErrorMessage] = []


class PlacementResult(CamelModel):
    schedule_id: str
    session: TimeSlot
    covered_periods: List[int]
    displaced: List[TimeSlot] = []
    usage: Optional[SubjectUsage] = None
    conflicts: List[ConflictInfo] = []
    messages: Messages = Messages()


# ===========================
# Period edit / report Models
# ===========================

class RemovedSession(CamelModel):
    schedule_id: str
    session: TimeSlot


class PeriodEditResult(CamelModel):
    period: Optional[Period] = None
    removed_sessions: List[RemovedSession] = []


class CellView(CamelModel):
    """What the grid shows at (day, period)"""
    day: Day
    period_id: int
    session: Optional[TimeSlot] = None
    is_start: bool = False
    color: Optional[str] = None


class FacultyEntry(CamelModel):
    schedule_id: str
    schedule_label: str
    session: TimeSlot
    subject_name: str
    clash: bool = False


class FacultyTimetable(CamelModel):
    faculty: Faculty
    load: int
    entries: List[FacultyEntry] = []
