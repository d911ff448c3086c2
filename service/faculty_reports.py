"""
Faculty-wise views across all schedules of a department.
"""
from typing import Iterable, List

from models.schemas import BUSY, DAYS, FacultyEntry, Schedule
from service.conflicts import faculty_clashes


def faculty_load(schedules: Iterable[Schedule], faculty_id: str) -> int:
    """Total periods taught by a faculty member (Busy blocks excluded)."""
    total = 0
    for schedule in schedules:
        for slot in schedule.time_slots:
            if slot.type != BUSY and faculty_id in slot.faculty_ids:
                total += slot.duration
    return total


def faculty_timetable(schedules: Iterable[Schedule], faculty_id: str) -> List[FacultyEntry]:
    """
    Every session of a faculty member, ordered by day and period position.

    Entries sharing a cell with another of the faculty's sessions are flagged
    with `clash`.
    """
    schedules = list(schedules)
    clashing = set()
    for ids in faculty_clashes(schedules, faculty_id).values():
        clashing.update(ids)

    entries = []
    for schedule in schedules:
        positions = {p.id: idx for idx, p in enumerate(schedule.periods)}
        for slot in schedule.time_slots:
            if faculty_id not in slot.faculty_ids:
                continue

            if slot.type == BUSY:
                subject_name = "Busy"
            else:
                subject = schedule.find_subject(slot.subject_id)
                subject_name = subject.name if subject else "Unknown"

            entries.append((
                DAYS.index(slot.day),
                positions.get(slot.period, len(positions)),
                FacultyEntry(
                    schedule_id=schedule.id,
                    schedule_label=schedule.details.label,
                    session=slot,
                    subject_name=subject_name,
                    clash=slot.id in clashing,
                ),
            ))

    entries.sort(key=lambda e: (e[0], e[1]))
    return [entry for _, _, entry in entries]

