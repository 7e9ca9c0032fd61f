"""Shared data models used across the tide window agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from .errors import InvalidSpec
from .time_utils import TimeOfDay, format_display


@dataclass(frozen=True)
class TidePrediction:
    """A single provider forecast: local date/time and predicted height (ft)."""

    date: date
    time: TimeOfDay
    height: float


@dataclass(frozen=True)
class ActivityWindow:
    """Clock-time interval during which the tide must stay above ``minimum_height``."""

    start: TimeOfDay
    end: TimeOfDay
    minimum_height: float

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidSpec(
                f"Window start {self.start} is after end {self.end}; overnight windows are not supported"
            )

    def is_safe_height(self, height: float) -> bool:
        """Heights equal to the minimum count as unsafe."""
        return height > self.minimum_height


@dataclass(frozen=True)
class WindowEvent:
    """A prediction that took part in the window check."""

    time: TimeOfDay
    height: float
    is_safe: bool
    is_boundary_carry: bool = False

    @property
    def display_time(self) -> str:
        return format_display(self.time)


@dataclass(frozen=True)
class DayVerdict:
    """Safety verdict for one calendar date."""

    date: Optional[date]
    is_safe: bool
    minimum_observed_height: Optional[float]
    events: Tuple[WindowEvent, ...] = ()
    error_reason: Optional[str] = None
    minimum_height: Optional[float] = None

    @property
    def margin(self) -> Optional[float]:
        """Headroom between the lowest observed tide and the minimum."""
        if self.minimum_observed_height is None or self.minimum_height is None:
            return None
        return self.minimum_observed_height - self.minimum_height


@dataclass(frozen=True)
class SummaryStats:
    safe_count: int
    caution_count: int
    total_count: int


@dataclass(frozen=True)
class Station:
    """A NOAA tide prediction station."""

    id: str
    name: str
    region: str

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass(frozen=True)
class ChartPoint:
    time: TimeOfDay
    height: float


@dataclass(frozen=True)
class ChartSeries:
    """Hourly tide curve for a date plus a narrative for the activity window."""

    date: date
    points: Tuple[ChartPoint, ...] = field(default_factory=tuple)
    direction: str = ""
