from datetime import date
from typing import Callable, Dict, List, Tuple

import httpx
import pytest
from tenacity import wait_none

from tide_window_agent.config import Settings
from tide_window_agent.models import ActivityWindow, TidePrediction
from tide_window_agent.noaa_client import NoaaTideClient
from tide_window_agent.time_utils import parse_time_of_day

DAY = date(2026, 10, 17)  # a Saturday

SAMPLE_ROWS = [("08:00", 1.2), ("11:30", 3.8), ("14:45", 0.9), ("18:10", 4.1)]


def make_predictions(rows, day: date = DAY) -> List[TidePrediction]:
    return [TidePrediction(date=day, time=parse_time_of_day(t), height=h) for t, h in rows]


def make_window(start: str, end: str, minimum: float) -> ActivityWindow:
    return ActivityWindow(start=parse_time_of_day(start), end=parse_time_of_day(end), minimum_height=minimum)


def noaa_payload(rows, day: date = DAY) -> Dict:
    return {"predictions": [{"t": f"{day.isoformat()} {t}", "v": f"{h:.3f}"} for t, h in rows]}


@pytest.fixture
def settings(monkeypatch) -> Settings:
    for key in ("TIDE_AGENT_TELEGRAM_BOT_TOKEN", "TIDE_AGENT_TELEGRAM_CHAT_ID", "TIDE_AGENT_CONCURRENCY"):
        monkeypatch.delenv(key, raising=False)
    return Settings(retry_attempts=3, timeout_seconds=5.0)


class RecordingTransport(httpx.MockTransport):
    """Mock NOAA transport that remembers every query it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording)


@pytest.fixture
def make_client(settings) -> Callable[..., Tuple[NoaaTideClient, RecordingTransport]]:
    def factory(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        client = NoaaTideClient(settings, transport=transport, retry_wait=wait_none())
        return client, transport

    return factory
