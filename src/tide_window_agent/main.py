"""Entry point for the tide window agent."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import structlog

from .checker import CheckReport, TideChecker
from .config import Settings
from .errors import FormatError, InvalidSpec
from .share import CheckRequest, from_query_params, parse_share_link
from .stations import group_by_region, list_stations
from .summariser import build_summary
from .telegram import format_message, post_to_telegram


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog + stdlib logging."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        stream=sys.stderr,
    )
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Check whether the tide stays above a minimum during an activity window.")
    parser.add_argument("--station", help="NOAA station id (defaults to TIDE_AGENT_DEFAULT_STATION).")
    parser.add_argument("--min", dest="minimum", help="Minimum safe tide height in feet.")
    parser.add_argument("--start", help="Window start, HH:MM.")
    parser.add_argument("--end", help="Window end, HH:MM.")

    schedule = parser.add_mutually_exclusive_group(required=True)
    schedule.add_argument("--date", help="Single date (YYYY-MM-DD, 'today' or 'tomorrow').")
    schedule.add_argument("--from", dest="begin", help="First date of a range (use with --to).")
    schedule.add_argument("--days", help="Recurring days of week, 0=Sunday ... 6=Saturday, e.g. '6,0'.")
    schedule.add_argument("--url", help="Shared link to re-run.")
    schedule.add_argument("--list-stations", action="store_true", help="Print the station directory by region.")

    parser.add_argument("--to", dest="end_date", help="Last date of a range, inclusive.")
    parser.add_argument("--weekly", action="store_true", help="Check every 7th day of the range.")
    parser.add_argument("--week-offset", type=int, help="Shift recurring days by whole weeks.")
    parser.add_argument("--period", type=int, help="Check the recurring days across a four-week period (0 = current).")
    parser.add_argument("--chart", action="store_true", help="Fetch hourly tides and describe the tide direction.")
    parser.add_argument("--detail", action="store_true", help="List every tide event checked.")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    parser.add_argument("--share-base", help="Print a share link built on this base URL.")
    parser.add_argument("--notify", action="store_true", help="Send the summary to Telegram.")
    parser.add_argument("--concurrency", type=int, help="Dates fetched at once.")
    args = parser.parse_args(argv)

    if args.days is None and (args.week_offset is not None or args.period is not None):
        parser.error("--week-offset and --period apply only to --days")
    if args.week_offset is not None and args.period is not None:
        parser.error("--week-offset and --period cannot be combined")
    if args.begin is None and (args.end_date is not None or args.weekly):
        parser.error("--to and --weekly apply only to --from")
    return args


def build_request(args: argparse.Namespace, settings: Settings) -> CheckRequest:
    """Translate CLI flags into a :class:`CheckRequest` via the share-link format."""
    today = settings.today()
    if args.url:
        return parse_share_link(args.url, settings=settings, today=today)

    params: Dict[str, str] = {}
    for key, value in (("station", args.station), ("min", args.minimum), ("start", args.start), ("end", args.end)):
        if value is not None:
            params[key] = value
    if args.chart:
        params["chart"] = "1"

    if args.days is not None:
        params["days"] = args.days
        if args.period is not None:
            params["period"] = str(args.period)
        elif args.week_offset:
            params["week"] = str(args.week_offset)
    elif args.begin is not None:
        params["mode"] = "range"
        params["from"] = args.begin
        params["to"] = args.end_date or ""
        params["weekly"] = "1" if args.weekly else "0"
    else:
        params["mode"] = "single"
        params["date"] = args.date

    return from_query_params(params, settings=settings, today=today)


def station_directory() -> str:
    lines: List[str] = []
    for region, members in group_by_region(list_stations()).items():
        lines.append(region)
        lines.extend(f"  {station.id}  {station.name}" for station in members)
    return "\n".join(lines)


def report_as_dict(report: CheckReport) -> Dict[str, Any]:
    return {
        "station": report.request.station_id,
        "generated_at": report.generated_at.isoformat(),
        "summary": {
            "safe": report.summary.safe_count,
            "caution": report.summary.caution_count,
            "total": report.summary.total_count,
        },
        "verdicts": [
            {
                "date": verdict.date.isoformat() if verdict.date else None,
                "is_safe": verdict.is_safe,
                "minimum_observed_height": verdict.minimum_observed_height,
                "margin": verdict.margin,
                "error_reason": verdict.error_reason,
                "events": [
                    {
                        "time": str(event.time),
                        "height": event.height,
                        "is_safe": event.is_safe,
                        "is_boundary_carry": event.is_boundary_carry,
                    }
                    for event in verdict.events
                ],
            }
            for verdict in report.verdicts
        ],
        "charts": {
            day.isoformat(): {"direction": chart.direction, "points": len(chart.points)}
            for day, chart in report.charts.items()
        },
    }


async def run(settings: Settings, request: CheckRequest, args: argparse.Namespace) -> CheckReport:
    """Execute the check and deliver the results."""
    report = await TideChecker(settings).run(request)
    share_link = request.share_link(args.share_base) if args.share_base else None

    if args.json:
        payload = report_as_dict(report)
        if share_link:
            payload["share_link"] = share_link
        print(json.dumps(payload, indent=2))
    else:
        print(build_summary(report, detail=args.detail))
        if share_link:
            print(f"\nShare: {share_link}")

    if args.notify:
        await post_to_telegram(settings, format_message(report, share_link))
    return report


def cli(argv: Optional[List[str]] = None) -> int:
    """Console script entrypoint."""
    args = parse_args(argv)
    if args.list_stations:
        print(station_directory())
        return 0

    try:
        overrides = {"concurrency": args.concurrency} if args.concurrency else {}
        settings = Settings(**overrides)
    except Exception as exc:  # pragma: no cover - startup validation
        configure_logging()
        LOGGER.exception("settings.error", error=str(exc))
        return 2

    configure_logging(settings.log_level, settings.log_json)

    try:
        request = build_request(args, settings)
    except (FormatError, InvalidSpec) as exc:
        LOGGER.error("request.invalid", error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        asyncio.run(run(settings, request, args))
    except (FormatError, InvalidSpec) as exc:
        LOGGER.error("request.invalid", error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover - top level
        LOGGER.exception("check.failed", error=str(exc))
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
