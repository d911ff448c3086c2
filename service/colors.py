"""
Deterministic session colors.

Colors only help tell sessions apart on the grid. Two sessions with the same
subject and the same faculty set always get the same color; collisions
between different subjects are accepted.
"""
from typing import Iterable

from models.schemas import BUSY, Schedule, TimeSlot

PALETTE = [
    "rose", "orange", "amber", "yellow", "lime", "emerald",
    "teal", "cyan", "sky", "blue", "indigo", "violet", "fuchsia", "pink", "slate",
]

FALLBACK_COLOR = "slate"


def _code_units(text: str) -> Iterable[int]:
    # UTF-16 code units, so keys hash the same as in the browser editor
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def string_hash(text: str) -> int:
    """hash = hash * 31 + unit, wrapped to a signed 32-bit integer."""
    value = 0
    for unit in _code_units(text):
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def color_for(subject_id: str, faculty_ids: Iterable[str]) -> str:
    key = f"{subject_id}:{'-'.join(sorted(faculty_ids))}"
    return PALETTE[abs(string_hash(key)) % len(PALETTE)]


def session_color(schedule: Schedule, session: TimeSlot) -> str:
    if session.type == BUSY:
        return FALLBACK_COLOR
    subject = schedule.find_subject(session.subject_id)
    if subject is None:
        return FALLBACK_COLOR
    if subject.color:
        return subject.color
    return color_for(session.subject_id, session.faculty_ids)
