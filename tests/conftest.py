import pytest
from fastapi.testclient import TestClient

from main import app
from models.schemas import ClassDetails, Faculty, Period, Schedule, Subject
from routers.schedule import get_department
from service.department import DepartmentView


def build_periods():
    """Four teaching hours with a recess after the second one."""
    return [
        Period(id=1, label="Hour 1", start_minutes=480, end_minutes=540),
        Period(id=2, label="Hour 2", start_minutes=540, end_minutes=600),
        Period(id=3, label="Recess", start_minutes=600, end_minutes=630, is_break=True),
        Period(id=4, label="Hour 3", start_minutes=630, end_minutes=690),
        Period(id=5, label="Hour 4", start_minutes=690, end_minutes=750),
    ]


def build_schedule(schedule_id="cse-3", class_name="CSE", semester="3", time_slots=None, periods=None):
    return Schedule(
        id=schedule_id,
        details=ClassDetails(class_name=class_name, section="A", session="2025-26", semester=semester),
        subjects=[
            Subject(id="math", name="Mathematics", code="MA101", theory_count=3, practical_count=2),
            Subject(id="phy", name="Physics", code="PH101", theory_count=2, practical_count=2),
        ],
        faculties=[
            Faculty(id="f1", name="Alice Smith"),
            Faculty(id="f2", name="Bob Johnson"),
            Faculty(id="f3", name="Carol Diaz", initials="CD"),
        ],
        periods=periods if periods is not None else build_periods(),
        time_slots=time_slots or [],
    )


@pytest.fixture
def make_schedule():
    return build_schedule


@pytest.fixture
def schedule():
    return build_schedule()


@pytest.fixture
def department():
    return DepartmentView()


@pytest.fixture
def client(department):
    """Test client bound to a fresh department view."""
    app.dependency_overrides[get_department] = lambda: department
    yield TestClient(app)
    app.dependency_overrides.clear()
