"""
Multi-period session placement.

Break policy: a span is `duration` consecutive table positions starting at
the session's start period, and none of them may be a break. Sessions never
jump over a recess.
"""
import logging
from typing import List, NamedTuple, Optional, Tuple

from models.schemas import BUSY, Period, Schedule, TimeSlot, now_millis
from service.exceptions import (
    EmptyAssignment, InvalidSpan, UnknownFaculty, UnknownPeriod, UnknownSubject
)

logger = logging.getLogger(__name__)


class Placement(NamedTuple):
    schedule: Schedule
    session: TimeSlot
    covered: List[int]
    displaced: List[TimeSlot]


def _position(periods: List[Period], period_id: int) -> int:
    for idx, period in enumerate(periods):
        if period.id == period_id:
            return idx
    raise UnknownPeriod(period_id)


def resolve_span(periods: List[Period], start_period_id: int, duration: int) -> List[int]:
    """
    Return the ids of the periods a session starting at `start_period_id`
    occupies, start included.

    Raises:
        UnknownPeriod: the start period is not in the table.
        InvalidSpan: the span starts on or reaches a break, or runs past the
            end of the table.
    """
    if duration < 1:
        raise InvalidSpan(f"Duration must be at least 1 period, got {duration}")

    start_idx = _position(periods, start_period_id)
    span = periods[start_idx:start_idx + duration]

    for period in span:
        if period.is_break:
            raise InvalidSpan(
                f"A {duration}-period session starting at '{periods[start_idx].label}' "
                f"would cover the break '{period.label}'",
                details={"period": start_period_id, "duration": duration, "break": period.id},
            )

    if len(span) < duration:
        raise InvalidSpan(
            f"A {duration}-period session starting at '{periods[start_idx].label}' "
            f"runs past the last period",
            details={"period": start_period_id, "duration": duration},
        )

    return [p.id for p in span]


def span_fits(periods: List[Period], start_period_id: int, duration: int) -> bool:
    try:
        resolve_span(periods, start_period_id, duration)
    except (InvalidSpan, UnknownPeriod):
        return False
    return True


def covered_periods(periods: List[Period], session: TimeSlot) -> List[int]:
    """
    Periods a stored session occupies. Unlike `resolve_span` this never
    raises: a session that no longer fits is cut at the first break or at the
    end of the table, and an unknown start covers nothing.
    """
    try:
        start_idx = _position(periods, session.period)
    except UnknownPeriod:
        return []

    covered = []
    for period in periods[start_idx:start_idx + session.duration]:
        if period.is_break:
            break
        covered.append(period.id)
    return covered


def validate_session(schedule: Schedule, session: TimeSlot) -> List[int]:
    """
    Check a session against its schedule without changing anything.

    Returns:
        The covered period ids.
    """
    if not session.faculty_ids:
        raise EmptyAssignment("At least one faculty member must be assigned")

    if session.type != BUSY:
        if not session.subject_id:
            raise EmptyAssignment("A subject must be selected")
        if schedule.find_subject(session.subject_id) is None:
            raise UnknownSubject(session.subject_id, owner=schedule.id)

    for faculty_id in session.faculty_ids:
        if schedule.find_faculty(faculty_id) is None:
            raise UnknownFaculty(faculty_id, owner=schedule.id)

    try:
        return resolve_span(schedule.periods, session.period, session.duration)
    except UnknownPeriod as exc:
        raise UnknownPeriod(exc.resource_id, owner=schedule.id) from exc


def place_session(schedule: Schedule, session: TimeSlot) -> Placement:
    """
    Place (or re-place) a session on a schedule.

    The session replaces whatever starts at the same cell, any earlier copy of
    itself (same id), and any session whose span intersects the new span.
    Everything is validated before the new schedule is built.
    """
    covered = validate_session(schedule, session)
    claimed = set(covered)

    kept = []
    displaced = []
    for slot in schedule.time_slots:
        if slot.id == session.id:
            continue
        if slot.day == session.day and claimed.intersection(covered_periods(schedule.periods, slot)):
            displaced.append(slot)
            continue
        kept.append(slot)

    if displaced:
        logger.info(
            f"Session {session.id} displaced {len(displaced)} session(s) "
            f"on {session.day} in schedule {schedule.id}"
        )

    updated = schedule.model_copy(update={
        "time_slots": kept + [session],
        "last_modified": now_millis(),
    })
    return Placement(schedule=updated, session=session, covered=covered, displaced=displaced)


def remove_session(schedule: Schedule, day: str, period_id: int) -> Tuple[Schedule, Optional[TimeSlot]]:
    """
    Remove the session that starts at (day, period_id), freeing its span.

    Returns:
        The new schedule and the removed session (None if the cell was empty).
    """
    removed = next(
        (s for s in schedule.time_slots if s.day == day and s.period == period_id),
        None,
    )
    if removed is None:
        return schedule, None

    updated = schedule.model_copy(update={
        "time_slots": [s for s in schedule.time_slots if s.id != removed.id],
        "last_modified": now_millis(),
    })
    return updated, removed
