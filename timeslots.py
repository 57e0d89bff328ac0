from __future__ import annotations
import re
from datetime import date, datetime, time, timedelta
from typing import Tuple


_CLOCK_RE = re.compile(
    r"^\s*(?P<hour>\d{1,2})(?::(?P<minute>\d{1,2}))?\s*(?P<modifier>[AaPp]\.?[Mm]\.?)?\s*$"
)
_DASHES = ("–", "—")


class TimeSlotError(ValueError):
    pass


def _clock_parts(text: str) -> Tuple[int, int]:
    m = _CLOCK_RE.match(text or "")
    if not m:
        raise TimeSlotError(f"Unrecognised time: {text!r}")

    hour = int(m.group("hour"))
    minute = int(m.group("minute") or 0)
    modifier = (m.group("modifier") or "").replace(".", "").upper()

    if minute > 59:
        raise TimeSlotError(f"Minutes out of range in {text!r}")
    if modifier:
        if not 1 <= hour <= 12:
            raise TimeSlotError(f"Hour out of range for 12-hour time in {text!r}")
        if modifier == "PM" and hour != 12:
            hour += 12
        elif modifier == "AM" and hour == 12:
            hour = 0
    elif hour > 23:
        raise TimeSlotError(f"Hour out of range in {text!r}")
    return hour, minute


def parse_clock(text: str) -> float:
    """
    Convert "H[:MM] [AM|PM]" into decimal hours, e.g. "12:30 PM" -> 12.5.
    Without a modifier the hour is read as 24-hour time.
    """
    hour, minute = _clock_parts(text)
    return hour + minute / 60


def clock_time(text: str) -> time:
    hour, minute = _clock_parts(text)
    return time(hour=hour, minute=minute)


def split_time_slot(slot: str) -> Tuple[str, str]:
    """
    Split "9:00 AM - 11:00 AM" once on the first dash. A slot without an
    end half returns an empty end string.
    """
    text = slot or ""
    for dash in _DASHES:
        text = text.replace(dash, "-")
    start, sep, end = text.partition("-")
    start = start.strip()
    if not start:
        raise TimeSlotError(f"Time slot has no start time: {slot!r}")
    return start, end.strip() if sep else ""


def slot_hours(slot: str) -> Tuple[float, float | None]:
    start, end = split_time_slot(slot)
    return parse_clock(start), (parse_clock(end) if end else None)


def slot_start(day: date, slot: str) -> datetime:
    start, _ = split_time_slot(slot)
    return datetime.combine(day, clock_time(start))


def slot_bounds(day: date, slot: str, default_minutes: int = 60) -> Tuple[datetime, datetime]:
    """
    Start and end datetimes of a slot on a given day. An end at or before the
    start belongs to the next day; a slot without an end lasts
    `default_minutes`.
    """
    start_text, end_text = split_time_slot(slot)
    start = datetime.combine(day, clock_time(start_text))
    if not end_text:
        return start, start + timedelta(minutes=default_minutes)
    end = datetime.combine(day, clock_time(end_text))
    if end <= start:
        end += timedelta(days=1)
    return start, end
