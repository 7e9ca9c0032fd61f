from datetime import date
from urllib.parse import parse_qs, urlsplit

import pytest

from conftest import make_window
from tide_window_agent.date_window import DateRange, RecurringPeriod, RecurringWeekly, SingleDate, expand
from tide_window_agent.errors import FormatError, InvalidSpec
from tide_window_agent.share import CheckRequest, from_query_params, parse_share_link
from tide_window_agent.stations import DEFAULT_STATION_ID

TODAY = date(2026, 10, 16)


@pytest.mark.parametrize(
    "schedule",
    [
        SingleDate(date(2026, 10, 17)),
        DateRange(date(2026, 10, 1), date(2026, 10, 31), 7),
        DateRange(date(2026, 10, 1), date(2026, 10, 3), 1),
        RecurringWeekly({0, 6}),
        RecurringWeekly({2}, week_offset=-1),
        RecurringPeriod({1, 4}),
        RecurringPeriod({6}, period_offset=2),
    ],
)
def test_share_link_round_trip(settings, schedule):
    request = CheckRequest(
        station_id="9414290",
        window=make_window("07:15", "09:45", 2.25),
        schedule=schedule,
        show_chart=True,
    )

    link = request.share_link("https://tides.example.org/recurring.html")

    assert parse_share_link(link, settings=settings, today=TODAY) == request


def test_recurring_params_match_dashboard_links(settings):
    request = CheckRequest("9414523", make_window("10:00", "14:30", 1.5), RecurringWeekly({6, 0}))

    params = request.to_query_params()

    assert params == {
        "station": "9414523",
        "min": "1.5",
        "days": "0,6",
        "start": "10:00",
        "end": "14:30",
        "chart": "0",
    }


def test_defaults_fill_missing_values(settings):
    request = from_query_params({"mode": "single", "date": "tomorrow"}, settings=settings, today=TODAY)

    assert request.station_id == settings.default_station == DEFAULT_STATION_ID
    assert request.window == make_window("10:00", "14:30", 1.5)
    assert request.schedule == SingleDate(date(2026, 10, 17))
    assert request.show_chart is False


def test_days_take_precedence_over_mode(settings):
    request = from_query_params({"days": "1,3", "mode": "range"}, settings=settings, today=TODAY)

    assert request.schedule == RecurringWeekly({1, 3})


def test_period_links_expand_across_four_weeks(settings):
    request = from_query_params({"days": "6", "period": "1"}, settings=settings, today=TODAY)

    assert request.schedule == RecurringPeriod({6}, period_offset=1)
    assert request.to_query_params()["period"] == "1"
    assert len(expand(request.schedule, TODAY)) == 4


@pytest.mark.parametrize("view", ["list", "calendar"])
def test_dashboard_view_links_select_the_current_period(settings, view):
    request = from_query_params({"days": "0,6", "view": view}, settings=settings, today=TODAY)

    assert request.schedule == RecurringPeriod({0, 6})


def test_minimum_height_survives_the_link_exactly(settings):
    request = CheckRequest("9414523", make_window("10:00", "14:30", 0.1 + 0.2), SingleDate(date(2026, 10, 17)))

    params = request.to_query_params()

    assert params["min"] == repr(0.1 + 0.2)
    assert from_query_params(params, settings=settings, today=TODAY) == request


@pytest.mark.parametrize("params", [{"days": "6", "week": "9999999"}, {"days": "6", "week": "-9999999"}])
def test_out_of_calendar_week_offset_is_invalid(settings, params):
    request = from_query_params(params, settings=settings, today=TODAY)

    with pytest.raises(InvalidSpec):
        expand(request.schedule, TODAY)


@pytest.mark.parametrize(
    ("params", "error"),
    [
        ({"days": "1", "start": "25:00"}, FormatError),
        ({"days": "1", "min": "high"}, FormatError),
        ({"days": "x"}, FormatError),
        ({"days": ""}, InvalidSpec),
        ({"days": "9"}, InvalidSpec),
        ({"days": "1", "period": "soon"}, FormatError),
        ({"mode": "range", "from": "2026-10-05", "to": "2026-10-01"}, InvalidSpec),
        ({"mode": "range", "from": "2026-10-05"}, InvalidSpec),
        ({"mode": "single"}, InvalidSpec),
        ({"mode": "weekly", "date": "2026-10-05"}, InvalidSpec),
        ({"days": "1", "start": "15:00", "end": "09:00"}, InvalidSpec),
    ],
)
def test_invalid_params(settings, params, error):
    with pytest.raises(error):
        from_query_params(params, settings=settings, today=TODAY)


def test_share_link_replaces_existing_query():
    request = CheckRequest("9414523", make_window("10:00", "14:30", 2.0), SingleDate(date(2026, 10, 17)))

    link = request.share_link("http://localhost:3000/?station=old")

    assert urlsplit(link).path == "/"
    query = parse_qs(urlsplit(link).query)
    assert query["station"] == ["9414523"]
    assert query["min"] == ["2"]
    assert query["mode"] == ["single"]


def test_odd_strides_cannot_be_shared():
    request = CheckRequest(
        "9414523",
        make_window("10:00", "14:30", 2.0),
        DateRange(date(2026, 10, 1), date(2026, 10, 31), 3),
    )

    with pytest.raises(InvalidSpec):
        request.to_query_params()
