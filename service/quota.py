"""
Per-subject hour quota tracking.

Quota is advisory: nothing here blocks a placement, it only reports how many
theory/practical hours a subject has used and has left.
"""
from typing import Optional

from models.schemas import PRACTICAL, THEORY, Schedule, SubjectUsage
from service.exceptions import UnknownSubject


def usage(schedule: Schedule, subject_id: str, exclude_session_id: Optional[str] = None) -> SubjectUsage:
    """
    Sum placed hours for a subject.

    Args:
        schedule: Schedule owning the subject
        subject_id: Subject to count
        exclude_session_id: Session being edited; left out so it is not
            counted against itself

    Raises:
        UnknownSubject: the subject is not part of the schedule
    """
    subject = schedule.find_subject(subject_id)
    if subject is None:
        raise UnknownSubject(subject_id, owner=schedule.id)

    used_theory = 0
    used_practical = 0
    for slot in schedule.time_slots:
        if slot.subject_id != subject_id or slot.id == exclude_session_id:
            continue
        if slot.type == THEORY:
            used_theory += slot.duration
        elif slot.type == PRACTICAL:
            used_practical += slot.duration

    return SubjectUsage(
        subject_id=subject_id,
        used_theory=used_theory,
        used_practical=used_practical,
        theory_remaining=max(0, subject.theory_count - used_theory),
        practical_remaining=max(0, subject.practical_count - used_practical),
        is_theory_full=used_theory >= subject.theory_count,
        is_practical_full=used_practical >= subject.practical_count,
    )


def exceeds_quota(schedule: Schedule, subject_id: str, session_type: str) -> bool:
    """True when placed hours of this type are strictly over the subject's count."""
    subject = schedule.find_subject(subject_id)
    if subject is None or session_type not in (THEORY, PRACTICAL):
        return False
    stats = usage(schedule, subject_id)
    if session_type == THEORY:
        return stats.used_theory > subject.theory_count
    return stats.used_practical > subject.practical_count
