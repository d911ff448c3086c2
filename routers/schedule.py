from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from models.schemas import (
    CellView, ConflictInfo, Day, FacultyTimetable, PeriodEditResult, PeriodInput,
    PeriodPatch, PlacementRequest, PlacementResult, Schedule, ScheduleCreate,
    SubjectUsage, TimeSlot
)
from service.department import DepartmentView

# Create a router instance
router = APIRouter()

_department = DepartmentView()


def get_department() -> DepartmentView:
    """Process-wide department view; overridden in tests."""
    return _department


# ===========================
# Schedules
# ===========================

@router.get("/schedules", response_model=List[Schedule])
async def list_schedules(department: DepartmentView = Depends(get_department)):
    return department.schedules()


@router.post("/schedules", response_model=Schedule, status_code=status.HTTP_201_CREATED)
async def create_schedule(data: ScheduleCreate, department: DepartmentView = Depends(get_department)):
    """
    Create a schedule from wizard output.

    When no periods are given, the preset table for the class level is used.
    """
    return department.create_schedule(data)


@router.put("/schedules/{schedule_id}", response_model=Schedule)
async def put_schedule(schedule_id: str, schedule: Schedule, department: DepartmentView = Depends(get_department)):
    """Load (or replace) a stored schedule document."""
    return department.put_schedule(schedule.model_copy(update={"id": schedule_id}))


@router.get("/schedules/{schedule_id}", response_model=Schedule)
async def get_schedule(schedule_id: str, department: DepartmentView = Depends(get_department)):
    return department.get_schedule(schedule_id)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(schedule_id: str, department: DepartmentView = Depends(get_department)):
    department.remove_schedule(schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/schedules/{schedule_id}/cells/{day}/{period_id}", response_model=CellView)
async def get_cell(schedule_id: str, day: Day, period_id: int, department: DepartmentView = Depends(get_department)):
    return department.cell(schedule_id, day, period_id)


# ===========================
# Sessions
# ===========================

@router.post("/schedules/{schedule_id}/sessions", response_model=PlacementResult)
async def place_session(
    schedule_id: str,
    request: PlacementRequest,
    department: DepartmentView = Depends(get_department),
):
    """
    Place or edit a session.

    Quota overflow and faculty conflicts do not block the placement; they are
    returned in `messages` and `conflicts`.
    """
    return department.place(schedule_id, request)


@router.delete("/schedules/{schedule_id}/sessions/{day}/{period_id}", response_model=Optional[TimeSlot])
async def delete_session(schedule_id: str, day: Day, period_id: int, department: DepartmentView = Depends(get_department)):
    return department.delete_session(schedule_id, day, period_id)


@router.get("/schedules/{schedule_id}/subjects/{subject_id}/usage", response_model=SubjectUsage)
async def subject_usage(
    schedule_id: str,
    subject_id: str,
    exclude_session_id: Optional[str] = Query(default=None, alias="excludeSessionId"),
    department: DepartmentView = Depends(get_department),
):
    return department.usage(schedule_id, subject_id, exclude_session_id)


# ===========================
# Periods
# ===========================

@router.post("/periods", response_model=PeriodEditResult, status_code=status.HTTP_201_CREATED)
async def add_period(
    data: PeriodInput,
    schedule_id: Optional[str] = Query(default=None, alias="scheduleId"),
    department: DepartmentView = Depends(get_department),
):
    """Append a period to every schedule (or only to `scheduleId`)."""
    return department.add_period(data, schedule_id)


@router.patch("/periods/{period_id}", response_model=PeriodEditResult)
async def update_period(
    period_id: int,
    patch: PeriodPatch,
    schedule_id: Optional[str] = Query(default=None, alias="scheduleId"),
    department: DepartmentView = Depends(get_department),
):
    return department.update_period(period_id, patch, schedule_id)


@router.delete("/periods/{period_id}", response_model=PeriodEditResult)
async def delete_period(
    period_id: int,
    schedule_id: Optional[str] = Query(default=None, alias="scheduleId"),
    department: DepartmentView = Depends(get_department),
):
    """Delete a period; sessions starting there are removed with it."""
    return department.delete_period(period_id, schedule_id)


# ===========================
# Queries
# ===========================

@router.get("/conflicts", response_model=Optional[ConflictInfo])
async def find_conflict(
    day: Day,
    period_id: int = Query(alias="periodId"),
    faculty_id: str = Query(alias="facultyId"),
    except_schedule_id: Optional[str] = Query(default=None, alias="exceptScheduleId"),
    department: DepartmentView = Depends(get_department),
):
    return department.conflict(day, period_id, faculty_id, except_schedule_id)


@router.get("/faculties/{faculty_id}/timetable", response_model=FacultyTimetable)
async def faculty_timetable(faculty_id: str, department: DepartmentView = Depends(get_department)):
    return department.faculty_timetable(faculty_id)


@router.get("/colors")
async def session_color(
    subject_id: str = Query(alias="subjectId"),
    faculty_ids: List[str] = Query(default=[], alias="facultyIds"),
    department: DepartmentView = Depends(get_department),
):
    return {"color": department.color(subject_id, faculty_ids)}
