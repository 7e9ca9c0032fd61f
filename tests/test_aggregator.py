import asyncio
from datetime import date, timedelta

import pytest

from conftest import SAMPLE_ROWS, make_predictions, make_window
from tide_window_agent.aggregator import aggregate, iter_verdicts, summarise
from tide_window_agent.errors import ProviderError
from tide_window_agent.evaluator import evaluate

DATES = [date(2026, 10, 17) + timedelta(days=offset) for offset in range(4)]


def fake_fetch(failing=(), delays=None, calls=None):
    async def fetch_day(day):
        if calls is not None:
            calls.append(day)
        if delays:
            await asyncio.sleep(delays.get(day, 0))
        if day in failing:
            raise ProviderError(f"No predictions available for {day.isoformat()}")
        rows = SAMPLE_ROWS if day.day % 2 else [("09:00", 3.0), ("12:00", 4.0)]
        return make_predictions(rows, day=day)

    return fetch_day


@pytest.mark.asyncio
async def test_one_verdict_per_date_in_order():
    window = make_window("10:00", "15:00", 1.5)
    verdicts, summary = await aggregate(DATES, fake_fetch(), window)

    assert [verdict.date for verdict in verdicts] == DATES
    assert summary.total_count == len(DATES)
    assert summary.safe_count + summary.caution_count == summary.total_count
    assert [verdict.is_safe for verdict in verdicts] == [False, True, False, True]


@pytest.mark.asyncio
async def test_provider_error_degrades_single_date():
    window = make_window("10:00", "15:00", 1.5)
    verdicts, summary = await aggregate(DATES, fake_fetch(failing={DATES[1]}), window)

    failed = verdicts[1]
    assert failed.is_safe is False
    assert failed.events == ()
    assert failed.minimum_observed_height is None
    assert "No predictions available" in failed.error_reason
    assert verdicts[3].is_safe is True
    assert summary.safe_count == 1
    assert summary.caution_count == 3


@pytest.mark.asyncio
async def test_concurrent_fetches_keep_date_order():
    window = make_window("10:00", "15:00", 1.5)
    delays = {DATES[0]: 0.03, DATES[1]: 0.0, DATES[2]: 0.02, DATES[3]: 0.01}

    sequential, sequential_summary = await aggregate(DATES, fake_fetch(), window)
    concurrent, concurrent_summary = await aggregate(DATES, fake_fetch(delays=delays), window, concurrency=4)

    assert concurrent == sequential
    assert concurrent_summary == sequential_summary


@pytest.mark.asyncio
async def test_abandoned_iteration_keeps_completed_verdicts():
    window = make_window("10:00", "15:00", 1.5)
    calls = []
    collected = []

    stream = iter_verdicts(DATES, fake_fetch(calls=calls), window)
    async for verdict in stream:
        collected.append(verdict)
        if len(collected) == 2:
            break
    await stream.aclose()

    assert [verdict.date for verdict in collected] == DATES[:2]
    assert calls == DATES[:2]


@pytest.mark.asyncio
async def test_empty_schedule():
    verdicts, summary = await aggregate([], fake_fetch(), make_window("10:00", "15:00", 1.5))

    assert verdicts == []
    assert (summary.safe_count, summary.caution_count, summary.total_count) == (0, 0, 0)


def test_summarise_counts():
    window = make_window("10:00", "15:00", 1.5)
    verdicts = [evaluate(make_predictions(SAMPLE_ROWS), window), evaluate([], window)]
    summary = summarise(verdicts)

    assert (summary.safe_count, summary.caution_count, summary.total_count) == (0, 2, 2)
