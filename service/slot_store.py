"""
Grid index over a schedule's sessions.
"""
from typing import Dict, List, Optional, Tuple

from models.schemas import Schedule, TimeSlot
from service.span_allocator import covered_periods

Cell = Tuple[str, int]  # (day, period id)


class SlotStore:
    """
    Read-only lookup of a schedule's sessions by grid cell.

    `starts` maps the cell where a session begins; `coverage` maps every cell
    a session occupies, the start included. A cell covered by a multi-period
    session never resolves to an independent session.
    """

    def __init__(self, schedule: Schedule):
        self.schedule = schedule
        self.starts: Dict[Cell, TimeSlot] = {}
        self.coverage: Dict[Cell, TimeSlot] = {}

        for slot in schedule.time_slots:
            self.starts[(slot.day, slot.period)] = slot
            for period_id in covered_periods(schedule.periods, slot):
                self.coverage[(slot.day, period_id)] = slot

    def starts_at(self, day: str, period_id: int) -> Optional[TimeSlot]:
        return self.starts.get((day, period_id))

    def session_at(self, day: str, period_id: int) -> Optional[TimeSlot]:
        """Session occupying the cell, whether it starts there or spans it."""
        return self.coverage.get((day, period_id))

    def is_covered_only(self, day: str, period_id: int) -> bool:
        """True for the trailing cells of a multi-period session."""
        return (day, period_id) in self.coverage and (day, period_id) not in self.starts

    def sessions_for_day(self, day: str) -> List[TimeSlot]:
        order = {p.id: idx for idx, p in enumerate(self.schedule.periods)}
        sessions = [s for s in self.schedule.time_slots if s.day == day]
        return sorted(sessions, key=lambda s: order.get(s.period, len(order)))

    def for_faculty(self, faculty_id: str) -> List[TimeSlot]:
        return [s for s in self.schedule.time_slots if faculty_id in s.faculty_ids]
