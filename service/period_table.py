"""
Period table operations.

A period table is an ordered list of `Period` objects. Functions here never
mutate their inputs; they return new lists (and new schedules) so callers can
swap state in one step.
"""
import logging
from typing import Dict, List, Optional, Tuple

from models.schemas import Period, Schedule, RemovedSession
from service.exceptions import InvalidPeriod, UnknownPeriod
from service.span_allocator import span_fits

logger = logging.getLogger(__name__)

NEW_PERIOD_ID = 0  # Sentinel for an unsaved period in the editor


FIRST_YEAR_PERIODS: List[Period] = [
    Period(id=1, label="Hour 1", start_minutes=600, end_minutes=660),
    Period(id=2, label="Hour 2", start_minutes=660, end_minutes=720),
    Period(id=3, label="Hour 3", start_minutes=720, end_minutes=780),
    Period(id=4, label="Recess", start_minutes=780, end_minutes=810, is_break=True),
    Period(id=5, label="Hour 4", start_minutes=810, end_minutes=870),
    Period(id=6, label="Hour 5", start_minutes=870, end_minutes=930),
    Period(id=7, label="Hour 6", start_minutes=930, end_minutes=960),
]

HIGHER_YEAR_PERIODS: List[Period] = [
    Period(id=1, label="Hour 1", start_minutes=630, end_minutes=690),
    Period(id=2, label="Hour 2", start_minutes=690, end_minutes=750),
    Period(id=3, label="Hour 3", start_minutes=750, end_minutes=810),
    Period(id=4, label="Recess", start_minutes=810, end_minutes=840, is_break=True),
    Period(id=5, label="Hour 4", start_minutes=840, end_minutes=900),
    Period(id=6, label="Hour 5", start_minutes=915, end_minutes=975),
    Period(id=7, label="Hour 6", start_minutes=975, end_minutes=1020),
]


def default_periods(level: str) -> List[Period]:
    """Return a fresh copy of the preset table for a class level."""
    preset = FIRST_YEAR_PERIODS if level == "1st-year" else HIGHER_YEAR_PERIODS
    return [p.model_copy() for p in preset]


def index_of(periods: List[Period], period_id: int) -> int:
    """Position of a period in the table; raises UnknownPeriod."""
    for idx, period in enumerate(periods):
        if period.id == period_id:
            return idx
    raise UnknownPeriod(period_id)


def get_period(periods: List[Period], period_id: int) -> Optional[Period]:
    return next((p for p in periods if p.id == period_id), None)


def next_period_id(periods: List[Period], high_water: int = NEW_PERIOD_ID) -> int:
    """max(existing ids, high_water) + 1; never the sentinel, never a retired id."""
    return max([NEW_PERIOD_ID, high_water] + [p.id for p in periods]) + 1


def _check_position(periods: List[Period], idx: int, start: int, end: int):
    """Validate times of the period that sits (or will sit) at position idx."""
    if end <= start:
        raise InvalidPeriod(f"Period start ({start}) must be before end ({end})")

    if idx > 0 and periods[idx - 1].start_minutes > start:
        raise InvalidPeriod(
            f"Period must not start before the previous period ({periods[idx - 1].label})"
        )
    if idx + 1 < len(periods) and periods[idx + 1].start_minutes < start:
        raise InvalidPeriod(
            f"Period must not start after the next period ({periods[idx + 1].label})"
        )


def add_period(
    periods: List[Period],
    label: str,
    start: int,
    end: int,
    is_break: bool = False,
    high_water: int = NEW_PERIOD_ID,
) -> Tuple[List[Period], Period]:
    """
    Append a period with a fresh id.

    Periods are only ever appended, so the new period must not start before
    the current last one. `high_water` is the largest id the caller has ever
    handed out, so ids of deleted periods are not reused.

    Returns:
        The new table and the created period.
    """
    _check_position(periods, len(periods), start, end)

    period = Period(
        id=next_period_id(periods, high_water),
        label=label,
        start_minutes=start,
        end_minutes=end,
        is_break=is_break,
    )
    return periods + [period], period


def update_period(periods: List[Period], period_id: int, patch: Dict) -> List[Period]:
    """
    Apply a patch (label, start_minutes, end_minutes, is_break) to one period.

    The id never changes; the period keeps its position.
    """
    idx = index_of(periods, period_id)
    current = periods[idx]

    changes = {k: v for k, v in patch.items() if v is not None and k != "id"}
    updated = current.model_copy(update=changes)
    _check_position(periods, idx, updated.start_minutes, updated.end_minutes)

    return periods[:idx] + [updated] + periods[idx + 1:]


def prune_sessions(schedule: Schedule, periods: List[Period]) -> Tuple[Schedule, List[RemovedSession]]:
    """
    Install a new period table on a schedule, dropping sessions that no
    longer fit it (start period gone, or span no longer satisfiable).
    """
    kept = []
    removed = []
    for slot in schedule.time_slots:
        if span_fits(periods, slot.period, slot.duration):
            kept.append(slot)
        else:
            removed.append(RemovedSession(schedule_id=schedule.id, session=slot))

    if removed:
        logger.warning(
            f"Removed {len(removed)} session(s) from schedule {schedule.id} after period change"
        )

    updated = schedule.model_copy(update={"periods": periods, "time_slots": kept})
    return updated, removed


def delete_period(
    schedules: List[Schedule],
    period_id: int,
) -> Tuple[List[Schedule], List[RemovedSession]]:
    """
    Delete a period from every schedule whose table contains it.

    Sessions starting at the period are removed, as are sessions whose span
    ran across it and cannot be laid out on the shortened table.

    Raises:
        UnknownPeriod: if no schedule has the period.
    """
    if not any(get_period(s.periods, period_id) for s in schedules):
        raise UnknownPeriod(period_id)

    result = []
    removed: List[RemovedSession] = []
    for schedule in schedules:
        if get_period(schedule.periods, period_id) is None:
            result.append(schedule)
            continue

        periods = [p for p in schedule.periods if p.id != period_id]
        updated, dropped = prune_sessions(schedule, periods)
        result.append(updated)
        removed.extend(dropped)

    logger.info(f"Deleted period {period_id}; {len(removed)} session(s) cascaded")
    return result, removed
