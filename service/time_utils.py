"""
Time helpers shared by the period table and the conflict detector.

All times inside the core are integer minutes since midnight; strings only
appear at the edges (user input and display labels).
"""
import re

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^\s*(\d{1,2})\s*:\s*(\d{2})\s*([ap]\.?m\.?)?\s*$", re.IGNORECASE)


def parse_time(text: str) -> int:
    """
    Parse a human time string to minutes since midnight.

    Accepted forms: "9:30", "09:30", "14:05", "1:30 PM", "12:15am".

    Without an AM/PM marker an un-padded hour between 1 and 6 is read as
    afternoon ("2:00" -> 14:00), matching how class times are usually typed.
    A zero-padded hour ("02:00") is always 24-hour.

    Raises:
        ValueError: if the text is not a valid time.
    """
    if text is None:
        raise ValueError("Time is required")

    match = _TIME_RE.match(text)
    if not match:
        raise ValueError(f"Invalid time '{text}'. Use H:MM, HH:MM or H:MM AM/PM")

    raw_hour, raw_minute, meridiem = match.groups()
    hour = int(raw_hour)
    minute = int(raw_minute)

    if minute > 59:
        raise ValueError(f"Invalid minutes in '{text}'")

    if meridiem:
        if not 1 <= hour <= 12:
            raise ValueError(f"Invalid 12-hour time '{text}'")
        is_pm = meridiem.lower().startswith("p")
        if hour == 12:
            hour = 12 if is_pm else 0
        elif is_pm:
            hour += 12
    else:
        if hour > 23:
            raise ValueError(f"Invalid hour in '{text}'")
        if len(raw_hour) == 1 and 1 <= hour <= 6:
            hour += 12

    return hour * 60 + minute


def overlaps(s1: int, e1: int, s2: int, e2: int) -> bool:
    """Intervals overlap when max(start) < min(end); touching endpoints do not."""
    return max(s1, s2) < min(e1, e2)


def _check_minutes(minutes: int):
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range: {minutes}")


def format24(minutes: int) -> str:
    """Format minutes since midnight as HH:MM."""
    _check_minutes(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format12(minutes: int) -> str:
    """Format minutes since midnight as H:MM AM/PM."""
    _check_minutes(minutes)
    hour, minute = divmod(minutes, 60)
    ampm = "PM" if hour >= 12 else "AM"
    hour = hour % 12 or 12
    return f"{hour}:{minute:02d} {ampm}"


def format_range(start: int, end: int) -> str:
    return f"{format12(start)} - {format12(end)}"


def format_duration(start: int, end: int) -> str:
    """Format the duration between two times as 'Xh Ymin'."""
    total_minutes = end - start

    hours = total_minutes // 60
    minutes = total_minutes % 60

    if hours > 0 and minutes > 0:
        return f"{hours}h {minutes}min"
    elif hours > 0:
        return f"{hours}h"
    else:
        return f"{minutes}min"
