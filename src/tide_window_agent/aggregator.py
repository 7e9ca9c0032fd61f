"""Run the window check across a schedule of dates."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import AsyncIterator, Awaitable, Callable, List, Sequence, Tuple

import structlog

from .errors import ProviderError
from .evaluator import evaluate
from .models import ActivityWindow, DayVerdict, SummaryStats, TidePrediction

LOGGER = structlog.get_logger(__name__)

FetchDay = Callable[[date], Awaitable[Sequence[TidePrediction]]]


async def check_day(day: date, fetch_day: FetchDay, window: ActivityWindow) -> DayVerdict:
    """Fetch and evaluate a single date; provider failures become a no-data verdict."""
    try:
        predictions = await fetch_day(day)
    except ProviderError as exc:
        LOGGER.warning("aggregate.day.failed", date=day.isoformat(), error=str(exc))
        return DayVerdict(
            date=day,
            is_safe=False,
            minimum_observed_height=None,
            error_reason=str(exc),
            minimum_height=window.minimum_height,
        )

    verdict = evaluate(predictions, window, day=day)
    LOGGER.debug(
        "aggregate.day.evaluated",
        date=day.isoformat(),
        is_safe=verdict.is_safe,
        minimum_observed_height=verdict.minimum_observed_height,
        events=len(verdict.events),
    )
    return verdict


async def iter_verdicts(
    dates: Sequence[date],
    fetch_day: FetchDay,
    window: ActivityWindow,
) -> AsyncIterator[DayVerdict]:
    """
    Yield one verdict per date, strictly in order, one fetch at a time.

    Callers that stop iterating early keep every verdict already yielded.
    """
    for day in dates:
        yield await check_day(day, fetch_day, window)


def summarise(verdicts: Sequence[DayVerdict]) -> SummaryStats:
    safe = sum(1 for verdict in verdicts if verdict.is_safe)
    return SummaryStats(safe_count=safe, caution_count=len(verdicts) - safe, total_count=len(verdicts))


async def aggregate(
    dates: Sequence[date],
    fetch_day: FetchDay,
    window: ActivityWindow,
    *,
    concurrency: int = 1,
) -> Tuple[List[DayVerdict], SummaryStats]:
    """
    Evaluate every date and summarise the results.

    ``concurrency`` above one overlaps fetches, but verdicts always come back
    in the order of ``dates``.
    """
    if concurrency <= 1:
        verdicts = [verdict async for verdict in iter_verdicts(dates, fetch_day, window)]
    else:
        semaphore = asyncio.Semaphore(concurrency)

        async def bounded(day: date) -> DayVerdict:
            async with semaphore:
                return await check_day(day, fetch_day, window)

        verdicts = list(await asyncio.gather(*(bounded(day) for day in dates)))

    summary = summarise(verdicts)
    LOGGER.info(
        "aggregate.complete",
        total=summary.total_count,
        safe=summary.safe_count,
        caution=summary.caution_count,
    )
    return verdicts, summary
