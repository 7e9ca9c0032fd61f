"""Wrapper around the NOAA CO-OPS tide prediction API."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from .config import Settings
from .errors import FormatError, ProviderError, TransientProviderError
from .models import TidePrediction
from .time_utils import TimeOfDay, format_provider_date, parse_provider_timestamp

LOGGER = structlog.get_logger(__name__)

_BASE_PARAMS = {
    "product": "predictions",
    "datum": "MLLW",
    "time_zone": "lst_ldt",
    "units": "english",
    "format": "json",
}

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def day_query(station_id: str, begin_date: str, hours: Union[int, str] = 24) -> Dict[str, str]:
    """Coarse predictions for ``hours`` hours from midnight of ``begin_date`` (YYYYMMDD)."""
    return {"begin_date": begin_date, "range": str(hours), "station": station_id}


def hourly_query(station_id: str, begin_date: str) -> Dict[str, str]:
    return {**day_query(station_id, begin_date, 24), "interval": "h"}


def hilo_query(station_id: str, begin_date: str, end_date: str) -> Dict[str, str]:
    return {"begin_date": begin_date, "end_date": end_date, "station": station_id, "interval": "hilo"}


class NoaaTideClient:
    """Fetch tide predictions for a station and date from NOAA."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self._settings = settings
        self._transport = transport
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=8)

    async def fetch_day(
        self,
        station_id: str,
        day: date,
        window_end: Optional[TimeOfDay] = None,
    ) -> List[TidePrediction]:
        """
        Coarse predictions from midnight through the end of the activity window.

        NOAA's ``range`` is a span in hours, so only ``window_end.hour + 1``
        hours are requested when the window end is known.
        """
        hours = window_end.hour + 1 if window_end is not None else 24
        params = day_query(station_id, format_provider_date(day), hours)
        return await self._fetch_predictions(params, day=day)

    async def fetch_hourly(self, station_id: str, day: date) -> List[TidePrediction]:
        """Hourly predictions for a full day, used for charting."""
        params = hourly_query(station_id, format_provider_date(day))
        return await self._fetch_predictions(params, day=day)

    async def fetch_raw(self, params: Mapping[str, str]) -> Dict[str, Any]:
        """Return NOAA's JSON body untouched, retrying transient failures."""
        query = {**_BASE_PARAMS, "application": self._settings.noaa_application, **params}
        LOGGER.info(
            "noaa.request.start",
            station=query.get("station"),
            begin_date=query.get("begin_date"),
            interval=query.get("interval"),
        )

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TransientProviderError),
            wait=self._retry_wait,
            stop=stop_after_attempt(self._settings.retry_attempts),
            reraise=True,
        ):
            with attempt:
                return await self._get(query)

    async def _get(self, query: Dict[str, str]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(str(self._settings.noaa_base_url), params=query)
        except httpx.TransportError as exc:
            LOGGER.warning("noaa.request.transport_error", error=str(exc))
            raise TransientProviderError(f"Failed to reach NOAA: {exc}") from exc

        if response.status_code in _RETRYABLE_STATUS:
            LOGGER.warning("noaa.request.retryable_status", status_code=response.status_code)
            raise TransientProviderError(f"NOAA responded with {response.status_code}")
        if not response.is_success:
            LOGGER.error("noaa.request.failed", status_code=response.status_code, body=response.text[:200])
            raise ProviderError(f"NOAA responded with {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("NOAA returned a response that is not JSON") from exc
        if not isinstance(payload, dict):
            raise ProviderError("NOAA returned an unexpected payload")
        return payload

    async def _fetch_predictions(self, params: Mapping[str, str], *, day: Optional[date] = None) -> List[TidePrediction]:
        payload = await self.fetch_raw(params)
        predictions = parse_predictions(payload)
        if day is not None:
            predictions = [prediction for prediction in predictions if prediction.date == day]
        if not predictions:
            raise ProviderError("No predictions available")
        LOGGER.debug("noaa.request.success", station=params.get("station"), count=len(predictions))
        return predictions


def parse_predictions(payload: Mapping[str, Any]) -> List[TidePrediction]:
    """Convert a NOAA ``predictions`` payload into ordered :class:`TidePrediction` values."""
    error = payload.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise ProviderError(message or "NOAA reported an error")

    rows = payload.get("predictions")
    if not rows:
        raise ProviderError("No predictions available")
    if not isinstance(rows, list):
        raise ProviderError(f"NOAA returned predictions as {type(rows).__name__}, expected a list")

    predictions: List[TidePrediction] = []
    for row in rows:
        try:
            day, time = parse_provider_timestamp(str(row.get("t", "")))
            height = float(row.get("v"))
        except (AttributeError, FormatError, TypeError, ValueError) as exc:
            raise ProviderError(f"Unreadable prediction row {row!r}: {exc}") from exc
        predictions.append(TidePrediction(date=day, time=time, height=height))

    predictions.sort(key=lambda prediction: (prediction.date, prediction.time))
    return predictions
