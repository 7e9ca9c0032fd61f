"""FastAPI application: NOAA proxy routes plus the tide window check endpoint."""

from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from . import __version__
from .checker import CheckReport, TideChecker
from .config import Settings
from .errors import FormatError, InvalidSpec, ProviderError
from .models import DayVerdict, Station
from .noaa_client import NoaaTideClient, day_query, hilo_query, hourly_query
from .share import from_query_params
from .stations import group_by_region, list_stations
from .summariser import describe_schedule
from .time_utils import format_display

LOGGER = structlog.get_logger(__name__)

app = FastAPI(title="Tide Window Agent", version=__version__)


class StationModel(BaseModel):
    id: str
    name: str
    region: str


class EventModel(BaseModel):
    time: str
    display_time: str
    height: float
    is_safe: bool
    is_boundary_carry: bool


class VerdictModel(BaseModel):
    date: Optional[date]
    is_safe: bool
    minimum_observed_height: Optional[float]
    margin: Optional[float]
    error_reason: Optional[str]
    events: List[EventModel]


class ChartModel(BaseModel):
    date: date
    points: List[Dict[str, Any]]
    direction: str


class SummaryModel(BaseModel):
    safe_count: int
    caution_count: int
    total_count: int


class CheckResponse(BaseModel):
    """Response schema for the /api/check endpoint."""

    station: str
    schedule: str
    generated_at: datetime
    summary: SummaryModel
    verdicts: List[VerdictModel]
    charts: List[ChartModel]
    share_link: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def get_client(settings: Settings = Depends(get_settings)) -> NoaaTideClient:
    return NoaaTideClient(settings)


def _require(params: Dict[str, Optional[str]]) -> Dict[str, str]:
    if not all(params.values()):
        raise HTTPException(status_code=400, detail=f"Missing required parameters: {', '.join(params)}")
    return {key: str(value) for key, value in params.items()}


async def _proxy(client: NoaaTideClient, params: Dict[str, str]) -> Dict[str, Any]:
    try:
        return await client.fetch_raw(params)
    except ProviderError as exc:
        LOGGER.error("api.proxy_failed", error=str(exc), station=params.get("station"))
        raise HTTPException(status_code=502, detail=f"Failed to fetch tide data from NOAA: {exc}") from exc


@app.get("/api/stations", response_model=List[StationModel])
async def stations() -> List[StationModel]:
    return [_station_model(station) for station in list_stations()]


@app.get("/api/stations/regions", response_model=Dict[str, List[StationModel]])
async def stations_by_region() -> Dict[str, List[StationModel]]:
    """Station directory grouped for a region picker, regions in directory order."""
    return {
        region: [_station_model(station) for station in members]
        for region, members in group_by_region(list_stations()).items()
    }


@app.get("/api/tides")
async def tides(
    station: Optional[str] = None,
    beginDate: Optional[str] = None,  # noqa: N803 - public query parameter name
    range: Optional[str] = None,  # noqa: A002
    client: NoaaTideClient = Depends(get_client),
) -> Dict[str, Any]:
    """Coarse predictions from ``beginDate`` for ``range`` hours."""
    params = _require({"station": station, "beginDate": beginDate, "range": range})
    return await _proxy(client, day_query(params["station"], params["beginDate"], params["range"]))


@app.get("/api/tides/daily")
async def tides_daily(
    station: Optional[str] = None,
    date: Optional[str] = None,
    client: NoaaTideClient = Depends(get_client),
) -> Dict[str, Any]:
    """Hourly predictions for a full day."""
    params = _require({"station": station, "date": date})
    return await _proxy(client, hourly_query(params["station"], params["date"]))


@app.get("/api/tides/hilo")
async def tides_hilo(
    station: Optional[str] = None,
    beginDate: Optional[str] = None,  # noqa: N803
    endDate: Optional[str] = None,  # noqa: N803
    client: NoaaTideClient = Depends(get_client),
) -> Dict[str, Any]:
    """High/low extrema between two dates."""
    params = _require({"station": station, "beginDate": beginDate, "endDate": endDate})
    return await _proxy(client, hilo_query(params["station"], params["beginDate"], params["endDate"]))


@app.get("/api/check", response_model=CheckResponse)
async def check(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: NoaaTideClient = Depends(get_client),
) -> CheckResponse:
    """Evaluate a shared-link style request and return per-date verdicts."""
    LOGGER.info("api.check.received", query=str(request.query_params))
    try:
        check_request = from_query_params(dict(request.query_params), settings=settings, today=settings.today())
        report = await TideChecker(settings, client).run(check_request)
    except (FormatError, InvalidSpec) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return _to_response(report, settings)


def _to_response(report: CheckReport, settings: Settings) -> CheckResponse:
    request = report.request
    return CheckResponse(
        station=request.station_id,
        schedule=describe_schedule(request, report.today),
        generated_at=report.generated_at,
        summary=SummaryModel(
            safe_count=report.summary.safe_count,
            caution_count=report.summary.caution_count,
            total_count=report.summary.total_count,
        ),
        verdicts=[_verdict_model(verdict) for verdict in report.verdicts],
        charts=[
            ChartModel(
                date=chart.date,
                points=[{"time": str(point.time), "height": point.height} for point in chart.points],
                direction=chart.direction,
            )
            for chart in report.charts.values()
        ],
        share_link=request.share_link(settings.share_base_url),
    )


def _station_model(station: Station) -> StationModel:
    return StationModel(id=station.id, name=station.name, region=station.region)


def _verdict_model(verdict: DayVerdict) -> VerdictModel:
    return VerdictModel(
        date=verdict.date,
        is_safe=verdict.is_safe,
        minimum_observed_height=verdict.minimum_observed_height,
        margin=verdict.margin,
        error_reason=verdict.error_reason,
        events=[
            EventModel(
                time=str(event.time),
                display_time=format_display(event.time),
                height=event.height,
                is_safe=event.is_safe,
                is_boundary_carry=event.is_boundary_carry,
            )
            for event in verdict.events
        ],
    )
