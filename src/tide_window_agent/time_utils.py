"""Time-of-day helpers shared by the evaluator, scheduler and renderers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from .errors import FormatError

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
_PROVIDER_TIMESTAMP_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{1,2}:\d{2})$")
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time in the station's local civil time."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise FormatError(f"Time out of range: {self.hour:02d}:{self.minute:02d}")

    @property
    def total_minutes(self) -> int:
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_time_of_day(text: str) -> TimeOfDay:
    """Parse ``HH:MM`` into a :class:`TimeOfDay`."""
    match = _TIME_PATTERN.match((text or "").strip())
    if not match:
        raise FormatError(f"Invalid time {text!r}; expected HH:MM")
    return TimeOfDay(int(match.group(1)), int(match.group(2)))


def parse_provider_timestamp(text: str) -> Tuple[date, TimeOfDay]:
    """Split a NOAA ``YYYY-MM-DD HH:MM`` timestamp into date and time."""
    match = _PROVIDER_TIMESTAMP_PATTERN.match((text or "").strip())
    if not match:
        raise FormatError(f"Invalid provider timestamp {text!r}; expected YYYY-MM-DD HH:MM")
    try:
        day = date.fromisoformat(match.group(1))
    except ValueError as exc:
        raise FormatError(f"Invalid provider timestamp {text!r}: {exc}") from exc
    return day, parse_time_of_day(match.group(2))


def compare_times(a: TimeOfDay, b: TimeOfDay) -> int:
    """Return -1, 0 or 1 comparing two times by minutes since midnight."""
    delta = a.total_minutes - b.total_minutes
    return (delta > 0) - (delta < 0)


def format_display(value: TimeOfDay) -> str:
    """12-hour clock, e.g. ``9:05 AM`` or ``12:30 PM``."""
    suffix = "PM" if value.hour >= 12 else "AM"
    hour12 = value.hour % 12 or 12
    return f"{hour12}:{value.minute:02d} {suffix}"


def format_time_range(start: TimeOfDay, end: TimeOfDay) -> str:
    return f"{format_display(start)} - {format_display(end)}"


def format_provider_date(value: date) -> str:
    """NOAA ``begin_date`` format."""
    return f"{value:%Y%m%d}"


def parse_iso_date(text: str, today: Optional[date] = None) -> date:
    """
    Parse ``YYYY-MM-DD`` or one of the relative keywords ``today``/``tomorrow``.

    The keywords let shared links stay valid ("next practice is tomorrow")
    without being rewritten every day.
    """
    cleaned = (text or "").strip()
    keyword = cleaned.lower()
    if keyword in {"today", "tomorrow"}:
        base = today or date.today()
        return base if keyword == "today" else base + timedelta(days=1)
    if not _ISO_DATE_PATTERN.match(cleaned):
        raise FormatError(f"Invalid date {text!r}; expected YYYY-MM-DD")
    try:
        return date.fromisoformat(cleaned)
    except ValueError as exc:
        raise FormatError(f"Invalid date {text!r}; expected YYYY-MM-DD") from exc
