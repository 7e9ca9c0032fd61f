"""Check a day's tide predictions against an activity window."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from .models import ActivityWindow, DayVerdict, TidePrediction, WindowEvent


def evaluate(
    predictions: Sequence[TidePrediction],
    window: ActivityWindow,
    day: Optional[date] = None,
) -> DayVerdict:
    """
    Produce the safety verdict for one day of predictions.

    ``predictions`` must be ordered by time. Samples after the window end are
    ignored. Samples strictly after the window start are checked, and the last
    sample at or before the start is carried in once as the boundary event,
    since the height at the opening instant falls between two samples. The
    carry applies as soon as any later sample shows the window has opened, so
    a short window with no sample inside it is judged on the carry alone.

    A day with no relevant samples is never safe: absence of confirmation is
    reported with ``minimum_observed_height=None`` and no events.
    """
    events: List[WindowEvent] = []
    last_before_window: Optional[TidePrediction] = None
    carry_consumed = False

    for prediction in predictions:
        if prediction.time <= window.start:
            last_before_window = prediction
            continue

        # First sample past the opening instant: the window opened on the carry.
        if last_before_window is not None and not carry_consumed:
            events.append(_event(last_before_window, window, is_boundary_carry=True))
            carry_consumed = True

        if prediction.time > window.end:
            break
        events.append(_event(prediction, window))

    if day is None and predictions:
        day = predictions[0].date

    if not events:
        return DayVerdict(
            date=day,
            is_safe=False,
            minimum_observed_height=None,
            minimum_height=window.minimum_height,
        )

    return DayVerdict(
        date=day,
        is_safe=all(event.is_safe for event in events),
        minimum_observed_height=min(event.height for event in events),
        events=tuple(events),
        minimum_height=window.minimum_height,
    )


def _event(prediction: TidePrediction, window: ActivityWindow, *, is_boundary_carry: bool = False) -> WindowEvent:
    return WindowEvent(
        time=prediction.time,
        height=prediction.height,
        is_safe=window.is_safe_height(prediction.height),
        is_boundary_carry=is_boundary_carry,
    )
