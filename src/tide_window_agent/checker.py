"""Orchestrates a check: expand the schedule, fetch tides, evaluate, chart."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from functools import partial
from typing import Dict, List, Optional

import structlog

from .aggregator import aggregate
from .config import Settings
from .date_window import expand
from .errors import ProviderError
from .models import ChartPoint, ChartSeries, DayVerdict, SummaryStats, TidePrediction
from .noaa_client import NoaaTideClient
from .share import CheckRequest
from .summariser import describe_direction
from .time_utils import TimeOfDay

LOGGER = structlog.get_logger(__name__)


@dataclass
class CheckReport:
    """Result of one check, consumed by the CLI, API and Telegram renderers."""

    request: CheckRequest
    generated_at: datetime
    verdicts: List[DayVerdict]
    summary: SummaryStats
    charts: Dict[date, ChartSeries] = field(default_factory=dict)
    today: Optional[date] = None


class TideChecker:
    """Runs :class:`CheckRequest` objects against the NOAA client."""

    def __init__(self, settings: Settings, client: Optional[NoaaTideClient] = None):
        self._settings = settings
        self._client = client or NoaaTideClient(settings)

    async def run(self, request: CheckRequest, today: Optional[date] = None) -> CheckReport:
        """Execute a check; schedule errors surface before any fetch."""
        today = today or self._settings.today()
        dates = expand(request.schedule, today)

        LOGGER.info(
            "check.start",
            station=request.station_id,
            dates=[value.isoformat() for value in dates],
            minimum_height=request.window.minimum_height,
        )

        fetch_day = partial(
            self._fetch_day,
            request.station_id,
            window_end=request.window.end,
        )
        verdicts, summary = await aggregate(
            dates,
            fetch_day,
            request.window,
            concurrency=self._settings.concurrency,
        )

        charts: Dict[date, ChartSeries] = {}
        if request.show_chart:
            for day in dates:
                chart = await self.chart_for(request, day)
                if chart is not None:
                    charts[day] = chart

        return CheckReport(
            request=request,
            generated_at=datetime.now(tz=timezone.utc),
            verdicts=verdicts,
            summary=summary,
            charts=charts,
            today=today,
        )

    async def chart_for(self, request: CheckRequest, day: date) -> Optional[ChartSeries]:
        """Hourly curve for ``day``; failures leave the chart out and never touch the verdict."""
        try:
            hourly = await self._client.fetch_hourly(request.station_id, day)
        except ProviderError as exc:
            LOGGER.warning("check.chart_failed", date=day.isoformat(), error=str(exc))
            return None

        points = tuple(ChartPoint(time=prediction.time, height=prediction.height) for prediction in hourly)
        return ChartSeries(date=day, points=points, direction=describe_direction(points, request.window))

    async def _fetch_day(self, station_id: str, day: date, *, window_end: TimeOfDay) -> List[TidePrediction]:
        return await self._client.fetch_day(station_id, day, window_end=window_end)
