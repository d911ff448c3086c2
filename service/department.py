"""
In-memory department view.

Holds every schedule the editor is working on. Each edit builds new schedule
objects first and then swaps the whole collection in a single assignment, so
readers (conflict checks, quota display) never observe a half-applied edit.
Edits themselves are serialized by a lock: every read-modify-commit runs
against the latest committed version of a schedule.
"""
import logging
import threading
from typing import Dict, Iterable, List, Optional

from config.settings import settings
from models.schemas import (
    BUSY, CellView, ConflictInfo, ErrorMessage, Faculty, FacultyTimetable, Messages,
    PeriodEditResult, PeriodInput, PeriodPatch, PlacementRequest, PlacementResult,
    Schedule, ScheduleCreate, SubjectUsage, TimeSlot, generate_id, now_millis
)
from service import period_table
from service.colors import color_for, session_color
from service.conflicts import find_conflict, find_interval_conflict, find_span_conflicts
from service.exceptions import InvalidPeriod, UnknownFaculty, UnknownPeriod, UnknownSchedule
from service.faculty_reports import faculty_load, faculty_timetable
from service.quota import exceeds_quota, usage
from service.slot_store import SlotStore
from service.span_allocator import place_session, remove_session
from service.time_utils import parse_time

logger = logging.getLogger(__name__)


def _parse_period_time(value: str, field: str) -> int:
    try:
        return parse_time(value)
    except ValueError as exc:
        raise InvalidPeriod(f"Invalid {field}: {exc}") from exc


class DepartmentView:
    """
    The schedules of one department, edited together.

    All schedules in the view are consulted for faculty conflicts, and period
    edits apply to every schedule unless a single schedule is named.
    """

    def __init__(self, schedules: Optional[Iterable[Schedule]] = None):
        self._schedules: Dict[str, Schedule] = {}
        self._period_high_water = period_table.NEW_PERIOD_ID
        self._lock = threading.RLock()
        self._commit(schedules or [])

    # ===========================
    # Schedule collection
    # ===========================

    def schedules(self) -> List[Schedule]:
        return list(self._schedules.values())

    def get_schedule(self, schedule_id: str) -> Schedule:
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise UnknownSchedule(schedule_id)
        return schedule

    def _commit(self, updated: Iterable[Schedule]):
        with self._lock:
            new_state = dict(self._schedules)
            for schedule in updated:
                new_state[schedule.id] = schedule
                for period in schedule.periods:
                    self._period_high_water = max(self._period_high_water, period.id)
            self._schedules = new_state

    def put_schedule(self, schedule: Schedule) -> Schedule:
        """Load or replace a whole schedule document."""
        self._commit([schedule])
        logger.info(f"Loaded schedule {schedule.id} ({schedule.details.label})")
        return schedule

    def create_schedule(self, data: ScheduleCreate) -> Schedule:
        level = data.details.level or settings.default_level
        periods = data.periods or period_table.default_periods(level)
        schedule = Schedule(
            id=generate_id(),
            details=data.details.model_copy(update={"level": level}),
            subjects=data.subjects,
            faculties=data.faculties,
            periods=periods,
        )
        return self.put_schedule(schedule)

    def remove_schedule(self, schedule_id: str):
        with self._lock:
            self.get_schedule(schedule_id)
            new_state = dict(self._schedules)
            del new_state[schedule_id]
            self._schedules = new_state
        logger.info(f"Removed schedule {schedule_id}")

    # ===========================
    # Sessions
    # ===========================

    def place(self, schedule_id: str, request: PlacementRequest) -> PlacementResult:
        """
        Place or edit a session and report quota and conflict advisories.

        Raises:
            UnknownSchedule, UnknownPeriod, UnknownSubject, UnknownFaculty,
            EmptyAssignment, InvalidSpan: nothing is changed.
        """
        session = TimeSlot(
            id=request.id or generate_id(),
            day=request.day,
            period=request.period,
            subject_id="" if request.type == BUSY else request.subject_id,
            faculty_ids=request.faculty_ids,
            type=request.type,
            duration=request.duration,
        )

        with self._lock:
            schedule = self.get_schedule(schedule_id)
            placement = place_session(schedule, session)
            others = self.schedules()
            self._commit([placement.schedule])

        messages: List[ErrorMessage] = []

        subject_usage = None
        if session.type != BUSY:
            subject_usage = usage(placement.schedule, session.subject_id)
            if exceeds_quota(placement.schedule, session.subject_id, session.type):
                subject = placement.schedule.find_subject(session.subject_id)
                logger.warning(f"{session.type} quota exceeded for {subject.name} in {schedule_id}")
                messages.append(ErrorMessage(
                    title="Quota Exceeded",
                    message=f"{session.type} hours for {subject.name} exceed the configured total",
                ))

        conflicts = self._placement_conflicts(placement.schedule, others, placement.covered, session)
        for conflict in conflicts:
            faculty = placement.schedule.find_faculty(conflict.faculty_id)
            logger.warning(f"Faculty {conflict.faculty_id} double-booked with {conflict.label}")
            messages.append(ErrorMessage(
                title="Faculty Conflict",
                message=f"{faculty.initials} Overlap: Already scheduled in {conflict.label}",
            ))

        logger.info(
            f"Placed {session.type} session {session.id} at {session.day} "
            f"periods {placement.covered} in {schedule_id}"
        )

        return PlacementResult(
            schedule_id=schedule_id,
            session=session,
            covered_periods=placement.covered,
            displaced=placement.displaced,
            usage=subject_usage,
            conflicts=conflicts,
            messages=Messages(error_message=messages),
        )

    def _placement_conflicts(
        self,
        placed: Schedule,
        schedules: List[Schedule],
        covered: List[int],
        session: TimeSlot,
    ) -> List[ConflictInfo]:
        """
        Period-exact conflicts over the span, then clock-time conflicts for
        faculty not yet flagged. The second pass catches clashes with
        schedules whose period tables no longer line up with this one.
        """
        conflicts = find_span_conflicts(schedules, placed.id, session.day, covered, session.faculty_ids)
        flagged = {c.faculty_id for c in conflicts}

        snapshot = [placed if s.id == placed.id else s for s in schedules]
        for faculty_id in session.faculty_ids:
            if faculty_id in flagged:
                continue
            info = find_interval_conflict(snapshot, placed.id, session, faculty_id)
            if info is not None:
                conflicts.append(info)
        return conflicts

    def delete_session(self, schedule_id: str, day: str, period_id: int) -> Optional[TimeSlot]:
        with self._lock:
            schedule = self.get_schedule(schedule_id)
            updated, removed = remove_session(schedule, day, period_id)
            if removed is not None:
                self._commit([updated])
        if removed is not None:
            logger.info(f"Deleted session {removed.id} at {day} period {period_id} in {schedule_id}")
        return removed

    def cell(self, schedule_id: str, day: str, period_id: int) -> CellView:
        schedule = self.get_schedule(schedule_id)
        if period_table.get_period(schedule.periods, period_id) is None:
            raise UnknownPeriod(period_id, owner=schedule_id)

        store = SlotStore(schedule)
        session = store.session_at(day, period_id)
        return CellView(
            day=day,
            period_id=period_id,
            session=session,
            is_start=store.starts_at(day, period_id) is not None,
            color=session_color(schedule, session) if session else None,
        )

    def usage(self, schedule_id: str, subject_id: str, exclude_session_id: Optional[str] = None) -> SubjectUsage:
        return usage(self.get_schedule(schedule_id), subject_id, exclude_session_id)

    # ===========================
    # Periods
    # ===========================

    def _targets(self, schedule_id: Optional[str]) -> List[Schedule]:
        if schedule_id is not None:
            return [self.get_schedule(schedule_id)]
        return self.schedules()

    def add_period(self, data: PeriodInput, schedule_id: Optional[str] = None) -> PeriodEditResult:
        start = _parse_period_time(data.start_time, "start time")
        end = _parse_period_time(data.end_time, "end time")

        with self._lock:
            targets = self._targets(schedule_id)
            if not targets:
                raise InvalidPeriod("No schedule to add the period to")

            updated = []
            created = None
            for schedule in targets:
                periods, period = period_table.add_period(
                    schedule.periods, data.label, start, end, data.is_break, high_water=self._period_high_water
                )
                created = created or period
                updated.append(schedule.model_copy(update={"periods": periods, "last_modified": now_millis()}))

            self._commit(updated)

        logger.info(f"Added period '{data.label}' to {len(updated)} schedule(s)")
        return PeriodEditResult(period=created)

    def update_period(
        self,
        period_id: int,
        patch: PeriodPatch,
        schedule_id: Optional[str] = None,
    ) -> PeriodEditResult:
        changes = {"label": patch.label, "is_break": patch.is_break}
        if patch.start_time is not None:
            changes["start_minutes"] = _parse_period_time(patch.start_time, "start time")
        if patch.end_time is not None:
            changes["end_minutes"] = _parse_period_time(patch.end_time, "end time")

        with self._lock:
            targets = [s for s in self._targets(schedule_id) if period_table.get_period(s.periods, period_id)]
            if not targets:
                raise UnknownPeriod(period_id)

            updated = []
            removed = []
            for schedule in targets:
                periods = period_table.update_period(schedule.periods, period_id, changes)
                pruned, dropped = period_table.prune_sessions(schedule, periods)
                updated.append(pruned.model_copy(update={"last_modified": now_millis()}))
                removed.extend(dropped)

            self._commit(updated)

        logger.info(f"Updated period {period_id} in {len(updated)} schedule(s)")
        return PeriodEditResult(
            period=period_table.get_period(updated[0].periods, period_id),
            removed_sessions=removed,
        )

    def delete_period(self, period_id: int, schedule_id: Optional[str] = None) -> PeriodEditResult:
        with self._lock:
            updated, removed = period_table.delete_period(self._targets(schedule_id), period_id)
            self._commit(updated)
        return PeriodEditResult(removed_sessions=removed)

    # ===========================
    # Queries
    # ===========================

    def conflict(
        self,
        day: str,
        period_id: int,
        faculty_id: str,
        except_schedule_id: Optional[str] = None,
    ) -> Optional[ConflictInfo]:
        return find_conflict(self.schedules(), except_schedule_id, day, period_id, faculty_id)

    def color(self, subject_id: str, faculty_ids: List[str]) -> str:
        return color_for(subject_id, faculty_ids)

    def faculty_registry(self) -> Dict[str, Faculty]:
        """All faculty referenced by the view's schedules; first definition wins."""
        registry: Dict[str, Faculty] = {}
        for schedule in self.schedules():
            for faculty in schedule.faculties:
                registry.setdefault(faculty.id, faculty)
        return registry

    def faculty_initials(self, faculty_ids: List[str]) -> str:
        if not faculty_ids:
            return "TBA"
        registry = self.faculty_registry()
        return ", ".join(registry[f].initials if f in registry else "??" for f in faculty_ids)

    def faculty_timetable(self, faculty_id: str) -> FacultyTimetable:
        faculty = self.faculty_registry().get(faculty_id)
        if faculty is None:
            raise UnknownFaculty(faculty_id)

        schedules = self.schedules()
        return FacultyTimetable(
            faculty=faculty,
            load=faculty_load(schedules, faculty_id),
            entries=faculty_timetable(schedules, faculty_id),
        )
