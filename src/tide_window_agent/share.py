"""Check requests and the shareable link format they round-trip through."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

from .config import Settings
from .date_window import DateRange, RecurringPeriod, RecurringWeekly, ScheduleSpec, SingleDate, validate
from .errors import FormatError, InvalidSpec
from .models import ActivityWindow
from .time_utils import parse_iso_date, parse_time_of_day


@dataclass(frozen=True)
class CheckRequest:
    """Everything needed to run one check, independent of any UI state."""

    station_id: str
    window: ActivityWindow
    schedule: ScheduleSpec
    show_chart: bool = False

    def to_query_params(self) -> Dict[str, str]:
        params = {
            "station": self.station_id,
            "min": _format_height(self.window.minimum_height),
        }
        schedule = self.schedule
        if isinstance(schedule, RecurringPeriod):
            params["days"] = ",".join(str(day) for day in sorted(schedule.days_of_week))
            params["period"] = str(schedule.period_offset)
        elif isinstance(schedule, RecurringWeekly):
            params["days"] = ",".join(str(day) for day in sorted(schedule.days_of_week))
            if schedule.week_offset:
                params["week"] = str(schedule.week_offset)
        elif isinstance(schedule, SingleDate):
            params["mode"] = "single"
            params["date"] = schedule.value.isoformat()
        else:
            if schedule.stride_days not in (1, 7):
                raise InvalidSpec("Shared links only support daily or weekly ranges")
            params["mode"] = "range"
            params["from"] = schedule.begin.isoformat()
            params["to"] = schedule.end.isoformat()
            params["weekly"] = "1" if schedule.weekly else "0"
        params["start"] = str(self.window.start)
        params["end"] = str(self.window.end)
        params["chart"] = "1" if self.show_chart else "0"
        return params

    def share_link(self, base_url: str) -> str:
        """Link that reopens this check, e.g. for a team group chat."""
        base = base_url.split("?", 1)[0]
        return f"{base}?{urlencode(self.to_query_params())}"


def from_query_params(
    params: Mapping[str, str],
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> CheckRequest:
    """
    Rebuild a :class:`CheckRequest` from shared link parameters.

    A ``days`` parameter selects a recurring schedule regardless of ``mode``.
    Links from the four-week dashboard carry ``period`` (or, in older links,
    ``view``) and check every selected weekday of that period.
    Missing station, minimum and window times fall back to the configured
    defaults; values that are present but malformed raise :class:`FormatError`.
    """
    settings = settings or Settings()

    station_id = (params.get("station") or settings.default_station).strip()
    if not station_id:
        raise InvalidSpec("A NOAA station id is required")

    window = ActivityWindow(
        start=parse_time_of_day(params.get("start") or settings.default_start_time),
        end=parse_time_of_day(params.get("end") or settings.default_end_time),
        minimum_height=_parse_height(params.get("min"), settings.default_minimum_height),
    )

    schedule = _parse_schedule(params, today)
    validate(schedule)

    return CheckRequest(
        station_id=station_id,
        window=window,
        schedule=schedule,
        show_chart=params.get("chart") == "1",
    )


def parse_share_link(url: str, settings: Optional[Settings] = None, today: Optional[date] = None) -> CheckRequest:
    query = urlsplit(url).query
    return from_query_params(dict(parse_qsl(query)), settings=settings, today=today)


def _parse_schedule(params: Mapping[str, str], today: Optional[date]) -> ScheduleSpec:
    if params.get("days") is not None:
        days = [_parse_int(part, "days") for part in params["days"].split(",") if part.strip()]
        if params.get("period") is not None or params.get("view") is not None:
            return RecurringPeriod(days, period_offset=_parse_int(params.get("period") or "0", "period"))
        return RecurringWeekly(days, week_offset=_parse_int(params.get("week") or "0", "week"))

    mode = params.get("mode") or "single"
    if mode == "single":
        raw = params.get("date")
        if not raw:
            raise InvalidSpec("A single-date check needs a date")
        return SingleDate(parse_iso_date(raw, today))
    if mode == "range":
        if not params.get("from") or not params.get("to"):
            raise InvalidSpec("A range check needs both from and to dates")
        return DateRange(
            begin=parse_iso_date(params["from"], today),
            end=parse_iso_date(params["to"], today),
            stride_days=7 if params.get("weekly") == "1" else 1,
        )
    raise InvalidSpec(f"Unknown mode {mode!r}; expected single or range")


def _parse_height(raw: Optional[str], default: float) -> float:
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise FormatError(f"Invalid minimum height {raw!r}") from exc


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise FormatError(f"Invalid {name} value {raw!r}") from exc


def _format_height(value: float) -> str:
    """Shortest text that parses back to ``value``; ``2.0`` becomes ``2``."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text
