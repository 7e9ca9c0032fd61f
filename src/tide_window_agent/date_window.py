"""Utilities for turning a schedule into the calendar dates to check."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import FrozenSet, Iterable, List, Optional, Union

from .errors import InvalidSpec

# Sunday-based, matching the dashboard's day checkboxes and shared links.
WEEKDAY_NAMES = {
    0: "Sunday",
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}

WEEKDAY_SHORT_NAMES = {index: name[:3] for index, name in WEEKDAY_NAMES.items()}

PERIOD_DAYS = 28


@dataclass(frozen=True)
class SingleDate:
    """Check one calendar date."""

    value: date


@dataclass(frozen=True)
class DateRange:
    """Check ``begin`` then every ``stride_days`` after it, up to ``end`` inclusive."""

    begin: date
    end: date
    stride_days: int = 1

    @property
    def weekly(self) -> bool:
        return self.stride_days == 7


@dataclass(frozen=True)
class RecurringWeekly:
    """Check the next occurrence of each weekday, shifted by whole weeks."""

    days_of_week: FrozenSet[int]
    week_offset: int = 0

    def __init__(self, days_of_week: Iterable[int], week_offset: int = 0):
        object.__setattr__(self, "days_of_week", frozenset(days_of_week))
        object.__setattr__(self, "week_offset", week_offset)


@dataclass(frozen=True)
class RecurringPeriod:
    """Check every selected weekday of a four-week period that opens on a Sunday."""

    days_of_week: FrozenSet[int]
    period_offset: int = 0

    def __init__(self, days_of_week: Iterable[int], period_offset: int = 0):
        object.__setattr__(self, "days_of_week", frozenset(days_of_week))
        object.__setattr__(self, "period_offset", period_offset)


ScheduleSpec = Union[SingleDate, DateRange, RecurringWeekly, RecurringPeriod]


def weekday_index(value: date) -> int:
    """Sunday-based day of week (0 = Sunday ... 6 = Saturday)."""
    return (value.weekday() + 1) % 7


def day_name(value: date) -> str:
    return WEEKDAY_NAMES[weekday_index(value)]


def next_weekday(today: date, day_of_week: int) -> date:
    """Next date falling on ``day_of_week``; ``today`` itself counts."""
    return today + timedelta(days=(day_of_week - weekday_index(today)) % 7)


def _validate_days(days_of_week: FrozenSet[int]) -> None:
    if not days_of_week:
        raise InvalidSpec("Select at least one day of the week")
    invalid = sorted(day for day in days_of_week if day not in WEEKDAY_NAMES)
    if invalid:
        raise InvalidSpec(f"Days of week must be 0-6 (Sunday-Saturday), got {invalid}")


def validate(spec: ScheduleSpec) -> None:
    """Raise :class:`InvalidSpec` for a schedule that cannot be expanded."""
    if isinstance(spec, SingleDate):
        return
    if isinstance(spec, DateRange):
        if spec.begin > spec.end:
            raise InvalidSpec(f"Range begins {spec.begin} after it ends {spec.end}")
        if spec.stride_days < 1:
            raise InvalidSpec(f"Range stride must be at least one day, got {spec.stride_days}")
        return
    if isinstance(spec, (RecurringWeekly, RecurringPeriod)):
        _validate_days(spec.days_of_week)
        return
    raise InvalidSpec(f"Unknown schedule type: {type(spec).__name__}")


def expand(spec: ScheduleSpec, today: Optional[date] = None) -> List[date]:
    """
    Determine which dates a schedule covers, ascending and without duplicates.

    ``today`` only matters for recurring schedules, which are recomputed from
    the current date on every request rather than stored.
    """
    validate(spec)

    if isinstance(spec, SingleDate):
        return [spec.value]

    if isinstance(spec, DateRange):
        count = (spec.end - spec.begin).days // spec.stride_days
        return [spec.begin + timedelta(days=index * spec.stride_days) for index in range(count + 1)]

    today = today or date.today()
    if isinstance(spec, RecurringPeriod):
        return period_dates(spec.days_of_week, today, spec.period_offset)

    try:
        shift = timedelta(weeks=spec.week_offset)
        return sorted(next_weekday(today, day) + shift for day in spec.days_of_week)
    except OverflowError as exc:
        raise InvalidSpec(f"Week offset {spec.week_offset} is outside the calendar") from exc


def period_start(today: date, period_offset: int = 0) -> date:
    """Sunday opening the four-week period ``period_offset`` periods from now."""
    week_start = today - timedelta(days=weekday_index(today))
    try:
        return week_start + timedelta(days=period_offset * PERIOD_DAYS)
    except OverflowError as exc:
        raise InvalidSpec(f"Period offset {period_offset} is outside the calendar") from exc


def period_dates(
    days_of_week: Iterable[int],
    today: Optional[date] = None,
    period_offset: int = 0,
    period_days: int = PERIOD_DAYS,
) -> List[date]:
    """Every date in the period whose weekday is selected, in calendar order."""
    selected = frozenset(days_of_week)
    _validate_days(selected)
    start = period_start(today or date.today(), period_offset)
    try:
        candidates = [start + timedelta(days=offset) for offset in range(period_days)]
    except OverflowError as exc:
        raise InvalidSpec(f"Period offset {period_offset} is outside the calendar") from exc
    return [value for value in candidates if weekday_index(value) in selected]


def period_label(today: Optional[date] = None, period_offset: int = 0) -> str:
    """E.g. ``October 11 - November 7, 2026`` or ``March 1 - 28, 2026``."""
    start = period_start(today or date.today(), period_offset)
    end = start + timedelta(days=PERIOD_DAYS - 1)
    if start.month == end.month:
        return f"{start:%B} {start.day} - {end.day}, {end.year}"
    return f"{start:%B} {start.day} - {end:%B} {end.day}, {end.year}"


def week_label(week_offset: int) -> str:
    if week_offset == 0:
        return "This Week"
    if week_offset == 1:
        return "Next Week"
    if week_offset == -1:
        return "Last Week"
    if week_offset > 1:
        return f"+{week_offset} Weeks"
    return f"{week_offset} Weeks"


def describe_days(days_of_week: Iterable[int]) -> str:
    """Short weekday list in calendar order starting Sunday, e.g. ``Sun, Sat``."""
    return ", ".join(WEEKDAY_SHORT_NAMES[day] for day in sorted(days_of_week))
