"""Plain-text rendering of check results."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, List, Optional, Sequence

from .date_window import (
    DateRange,
    RecurringPeriod,
    RecurringWeekly,
    SingleDate,
    day_name,
    describe_days,
    period_label,
    week_label,
)
from .models import ActivityWindow, ChartPoint, DayVerdict
from .stations import station_label
from .time_utils import format_time_range

if TYPE_CHECKING:
    from .checker import CheckReport
    from .share import CheckRequest

STABLE_THRESHOLD_FT = 0.2


def describe_direction(points: Sequence[ChartPoint], window: ActivityWindow) -> str:
    """
    Narrate how the tide moves across the activity window.

    Only hourly points inside ``[start, end]`` count. A turning point strictly
    inside the window (not at either edge) means the tide changes direction.
    """
    inside = [point for point in points if window.start <= point.time <= window.end]
    if len(inside) < 2:
        return ""

    heights = [point.height for point in inside]
    lowest = min(heights)
    highest = max(heights)
    low_index = heights.index(lowest)
    high_index = heights.index(highest)
    has_trough = 0 < low_index < len(heights) - 1
    has_peak = 0 < high_index < len(heights) - 1
    delta = heights[-1] - heights[0]

    if has_peak and not has_trough:
        return f"Tide RISES then FALLS (peak: {highest:.1f}ft)"
    if has_trough and not has_peak:
        return f"Tide FALLS then RISES (low: {lowest:.1f}ft)"
    if has_peak and has_trough:
        return f"Tide changes direction (range: {highest - lowest:.1f}ft)"
    if abs(delta) < STABLE_THRESHOLD_FT:
        return "Tide relatively stable during the window"
    if delta > 0:
        return f"Tide RISING during the window (+{delta:.1f}ft)"
    return f"Tide FALLING during the window ({delta:.1f}ft)"


def describe_schedule(request: "CheckRequest", today: Optional[date] = None) -> str:
    """One-line schedule summary, e.g. ``Sun, Sat • 10:00 AM - 2:30 PM • Min 1.5ft``.

    ``today`` anchors the label of a four-week period; without it the period
    is shown by its offset.
    """
    schedule = request.schedule
    if isinstance(schedule, RecurringPeriod):
        when = describe_days(schedule.days_of_week)
        if today is not None:
            when += f" ({period_label(today, schedule.period_offset)})"
        else:
            when += f" (4-week period {schedule.period_offset:+d})"
    elif isinstance(schedule, RecurringWeekly):
        when = describe_days(schedule.days_of_week)
        if schedule.week_offset:
            when += f" ({week_label(schedule.week_offset)})"
    elif isinstance(schedule, SingleDate):
        when = f"{schedule.value:%b} {schedule.value.day}, {schedule.value.year}"
    elif isinstance(schedule, DateRange):
        cadence = "weekly" if schedule.weekly else f"every {schedule.stride_days} day(s)"
        when = f"{schedule.begin.isoformat()} to {schedule.end.isoformat()}, {cadence}"
    else:  # pragma: no cover - exhaustive
        when = str(schedule)
    window = request.window
    return f"{when} • {format_time_range(window.start, window.end)} • Min {window.minimum_height:g}ft"


def format_verdict(verdict: DayVerdict, *, detail: bool = False) -> str:
    """Single verdict line, optionally followed by its window events."""
    icon = "✅" if verdict.is_safe else "⚠️"
    label = f"{day_name(verdict.date)} {verdict.date.isoformat()}" if verdict.date else "Unknown date"

    if verdict.error_reason:
        headline = f"{icon} {label}: no data ({verdict.error_reason})"
    elif verdict.minimum_observed_height is None:
        headline = f"{icon} {label}: no predictions fall in the window"
    else:
        margin = verdict.margin
        margin_text = f" ({margin:+.1f}ft)" if margin is not None else ""
        status = "good" if verdict.is_safe else "too low"
        headline = f"{icon} {label}: {status}, lowest {verdict.minimum_observed_height:.1f}ft{margin_text}"

    if not detail or not verdict.events:
        return headline

    lines = [headline]
    for event in verdict.events:
        marker = "ok" if event.is_safe else "LOW"
        carried = " (before window)" if event.is_boundary_carry else ""
        lines.append(f"    {event.display_time:>8}  {event.height:5.2f}ft  {marker}{carried}")
    return "\n".join(lines)


def build_summary(report: "CheckReport", *, detail: bool = False) -> str:
    """Return a human-friendly message summarising a check."""
    request = report.request
    summary = report.summary
    lines: List[str] = [
        f"🌊 Tide check for {station_label(request.station_id)}",
        describe_schedule(request, report.today),
        "",
        f"{summary.safe_count} safe, {summary.caution_count} caution, {summary.total_count} total",
        "",
    ]

    for verdict in report.verdicts:
        lines.append(format_verdict(verdict, detail=detail))
        chart = report.charts.get(verdict.date) if verdict.date else None
        if chart is not None and chart.direction:
            lines.append(f"    {chart.direction}")

    return "\n".join(lines).strip()
