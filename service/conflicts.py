"""
Cross-schedule faculty conflict detection.

Conflicts are reported, never resolved: the editor shows them as warnings
and the placement still goes through.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from models.schemas import BUSY, ConflictInfo, Schedule, TimeSlot
from service.slot_store import SlotStore
from service.span_allocator import covered_periods
from service.time_utils import overlaps

logger = logging.getLogger(__name__)


def _subject_name(schedule: Schedule, slot: TimeSlot) -> str:
    if slot.type == BUSY:
        return "Busy"
    subject = schedule.find_subject(slot.subject_id)
    return subject.name if subject else "Unknown"


def _conflict(schedule: Schedule, slot: TimeSlot, day: str, period_id: int, faculty_id: str) -> ConflictInfo:
    return ConflictInfo(
        schedule_id=schedule.id,
        label=schedule.details.label,
        semester=schedule.details.semester,
        subject_name=_subject_name(schedule, slot),
        type=slot.type,
        day=day,
        period_id=period_id,
        faculty_id=faculty_id,
    )


def find_conflict(
    schedules: Iterable[Schedule],
    except_schedule_id: Optional[str],
    day: str,
    period_id: int,
    faculty_id: str,
) -> Optional[ConflictInfo]:
    """
    Find the first other schedule where the faculty is engaged at (day, period).

    A period covered by a multi-period session counts as engaged, not only
    the period the session starts at. Periods are matched by id in each
    schedule's own table.
    """
    for schedule in schedules:
        if schedule.id == except_schedule_id:
            continue

        slot = SlotStore(schedule).session_at(day, period_id)
        if slot is not None and faculty_id in slot.faculty_ids:
            logger.debug(f"Faculty {faculty_id} busy in {schedule.id} on {day} period {period_id}")
            return _conflict(schedule, slot, day, period_id, faculty_id)

    return None


def find_span_conflicts(
    schedules: Iterable[Schedule],
    except_schedule_id: Optional[str],
    day: str,
    period_ids: List[int],
    faculty_ids: List[str],
) -> List[ConflictInfo]:
    """Conflicts for each faculty over each period of a span (first hit per faculty)."""
    schedules = list(schedules)
    found = []
    for faculty_id in faculty_ids:
        for period_id in period_ids:
            info = find_conflict(schedules, except_schedule_id, day, period_id, faculty_id)
            if info is not None:
                found.append(info)
                break
    return found


def session_interval(schedule: Schedule, slot: TimeSlot) -> Optional[Tuple[int, int]]:
    """Start and end minutes of a stored session in its own schedule's table."""
    covered = covered_periods(schedule.periods, slot)
    if not covered:
        return None
    by_id = {p.id: p for p in schedule.periods}
    return by_id[covered[0]].start_minutes, by_id[covered[-1]].end_minutes


def find_interval_conflict(
    schedules: Iterable[Schedule],
    schedule_id: str,
    session: TimeSlot,
    faculty_id: str,
) -> Optional[ConflictInfo]:
    """
    Time-based conflict check for departments whose period tables differ.

    The session's clock interval (in its own schedule's table) is compared
    with every other session of the faculty on the same day, in all
    schedules including its own. The session itself is skipped by id.
    """
    schedules = list(schedules)
    owner = next((s for s in schedules if s.id == schedule_id), None)
    if owner is None:
        return None

    target = session_interval(owner, session)
    if target is None:
        return None

    for schedule in schedules:
        for slot in schedule.time_slots:
            if slot.day != session.day or faculty_id not in slot.faculty_ids:
                continue
            if schedule.id == schedule_id and slot.id == session.id:
                continue

            interval = session_interval(schedule, slot)
            if interval and overlaps(target[0], target[1], interval[0], interval[1]):
                return _conflict(schedule, slot, session.day, slot.period, faculty_id)

    return None


def faculty_clashes(schedules: Iterable[Schedule], faculty_id: str) -> Dict[Tuple[str, int], List[str]]:
    """
    Cells where a faculty member holds more than one session.

    Returns:
        (day, period id) -> ids of the clashing sessions
    """
    cells = defaultdict(list)
    for schedule in schedules:
        for slot in schedule.time_slots:
            if faculty_id not in slot.faculty_ids:
                continue
            for period_id in covered_periods(schedule.periods, slot):
                cells[(slot.day, period_id)].append(slot.id)

    return {cell: ids for cell, ids in cells.items() if len(ids) > 1}
