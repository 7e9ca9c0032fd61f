from datetime import datetime, timezone

import httpx
import pytest

from conftest import DAY, make_window
from tide_window_agent.checker import CheckReport
from tide_window_agent.config import Settings
from tide_window_agent.date_window import SingleDate
from tide_window_agent.evaluator import evaluate
from tide_window_agent.models import SummaryStats
from tide_window_agent.share import CheckRequest
from tide_window_agent.telegram import format_message, post_to_telegram


def make_report():
    window = make_window("10:00", "14:00", 1.5)
    return CheckReport(
        request=CheckRequest("9414523", window, SingleDate(DAY)),
        generated_at=datetime(2026, 10, 16, tzinfo=timezone.utc),
        verdicts=[evaluate([], window, day=DAY)],
        summary=SummaryStats(0, 1, 1),
    )


def test_format_message_appends_share_link():
    message = format_message(make_report(), "https://tides.example.org/?days=0")

    assert message.startswith("🌊 Tide check for Redwood City, CA (9414523)")
    assert message.endswith("Open: https://tides.example.org/?days=0")


@pytest.mark.asyncio
async def test_post_to_telegram_sends_message():
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200, json={"ok": True})

    settings = Settings(telegram_bot_token="123:abc", telegram_chat_id="-100")
    await post_to_telegram(settings, "hello", transport=httpx.MockTransport(handler))

    assert sent[0].url.path == "/bot123:abc/sendMessage"
    assert b'"chat_id":"-100"' in sent[0].content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_post_to_telegram_requires_configuration(monkeypatch):
    monkeypatch.delenv("TIDE_AGENT_TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("TIDE_AGENT_TELEGRAM_CHAT_ID", raising=False)

    with pytest.raises(RuntimeError):
        await post_to_telegram(Settings(), "hello")


@pytest.mark.asyncio
async def test_post_to_telegram_raises_on_failure():
    settings = Settings(telegram_bot_token="123:abc", telegram_chat_id="-100")
    transport = httpx.MockTransport(lambda request: httpx.Response(403, text="Forbidden"))

    with pytest.raises(RuntimeError, match="403"):
        await post_to_telegram(settings, "hello", transport=transport)
