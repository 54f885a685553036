#!/usr/bin/env python3
"""
weather_report.py: Sensor analytics report over an exported JSON dataset.

Normalizes the raw records, filters a date window, aggregates the selected
metrics, overlays a trend on the first metric and summarizes variability and
day/night durations.

Usage:
    python -m weatherlens.cli.weather_report --data-file export.json \
        --from 2024-01-01 --to 2024-01-31 --aggregation daily \
        --metrics temperature humidity --trend linear --tz Europe/Paris
"""

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from weatherlens.config import (
    AGGREGATION_LEVELS,
    DEFAULT_MOVING_AVERAGE_PERIOD,
    DEFAULT_POLYNOMIAL_ORDER,
    DURATION_LEVELS,
    NUMERIC_METRICS,
    TREND_TYPES,
)
from weatherlens.core.aggregation import aggregate_points
from weatherlens.core.day_periods import aggregate_durations, segment_day_night_periods
from weatherlens.core.distribution import cv_comparison, y_axis_domain
from weatherlens.core.normalizer import filter_by_date_range, normalize_records
from weatherlens.core.trends import apply_trend, trend_key
from weatherlens.utils.date_util import (
    TimezoneLike,
    format_duration,
    format_timestamp_full,
    format_timestamp_short,
)
from weatherlens.utils.log_util import PACKAGE_LOGGER, app_logger

logger = app_logger(__name__)

TREND_TAIL = 5


def load_records(data_file: str) -> Any:
    """Load a JSON export: a list of records or an {id: record} mapping."""
    data_path = Path(data_file)
    if not data_path.exists():
        raise FileNotFoundError(f"Data file not found: {data_path}")
    with data_path.open(encoding="utf-8") as f:
        return json.load(f)


def build_report(
    records: Any,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    start_time: str = "00:00",
    end_time: str = "23:59",
    aggregation: str = "daily",
    metrics: Optional[List[str]] = None,
    trend: str = "none",
    polynomial_order: int = DEFAULT_POLYNOMIAL_ORDER,
    moving_average_period: int = DEFAULT_MOVING_AVERAGE_PERIOD,
    durations: str = "weekly",
    tz: TimezoneLike = None,
) -> Dict[str, Any]:
    """
    Run the analysis pipeline and collect the results.

    :param records: Raw records as loaded by load_records.
    :param date_from: First local day to keep; both bounds are needed to filter.
    :param date_to: Last local day to keep.
    :param aggregation: raw, hourly, daily, weekly or monthly.
    :param metrics: Metrics to report; defaults to every numeric metric.
    :param trend: Trend type applied to the first metric.
    :param durations: Day/night duration grouping level.
    :param tz: Timezone of the sensor wall clock.
    :return: dict - Plain, JSON-serializable report.
    """
    metrics = list(metrics) if metrics else list(NUMERIC_METRICS)

    points = normalize_records(records, tz=tz)
    if date_from is not None and date_to is not None:
        points = filter_by_date_range(
            points, date_from, date_to, start_time, end_time, tz=tz
        )

    series = aggregate_points(points, aggregation, metrics=metrics, tz=tz)
    value_keys = (
        list(metrics) if aggregation == "raw" else [f"{m}_avg" for m in metrics]
    )

    trended = apply_trend(
        series,
        value_keys[0],
        trend,
        polynomial_order=polynomial_order,
        moving_average_period=moving_average_period,
    )
    key = trend_key(value_keys[0])
    trend_tail = [
        {"timestamp": p["timestamp"], "value": p.get(key)}
        for p in trended[-TREND_TAIL:]
        if key in p
    ]

    periods = segment_day_night_periods(points)
    duration_groups = aggregate_durations(periods, durations, tz=tz)

    return {
        "pointCount": len(points),
        "firstTimestamp": points[0]["timestamp"] if points else None,
        "lastTimestamp": points[-1]["timestamp"] if points else None,
        "aggregation": aggregation,
        "metrics": metrics,
        "buckets": trended,
        "trend": {"type": trend, "key": key, "tail": trend_tail},
        "cvComparison": cv_comparison(points, metrics),
        "yAxisDomain": list(y_axis_domain(series, value_keys)),
        "dayNightPeriodCount": len(periods),
        "durations": [group.to_dict() for group in duration_groups],
    }


def print_report(report: Dict[str, Any], tz: TimezoneLike = None) -> None:
    """Print the report sections."""
    print("🌦️ WEATHER SENSOR REPORT")
    print("=" * 50)
    print(f"Points analysed: {report['pointCount']:,}")
    if report["firstTimestamp"] is not None:
        print(
            f"Data period: {format_timestamp_full(report['firstTimestamp'], tz)} to "
            f"{format_timestamp_full(report['lastTimestamp'], tz)}"
        )
    print()

    print(f"📅 {report['aggregation'].upper()} BUCKETS")
    print("=" * 40)
    for bucket in report["buckets"]:
        label = bucket.get("timestampDisplay") or format_timestamp_full(
            bucket["timestamp"], tz
        )
        values = []
        for metric in report["metrics"]:
            value = bucket.get(f"{metric}_avg", bucket.get(metric))
            if isinstance(value, (int, float)):
                values.append(f"{metric}={value:.2f}")
        print(f"  {label}: {', '.join(values) if values else 'no data'}")
    print(f"Y axis domain: {report['yAxisDomain']}")
    print()

    trend = report["trend"]
    if trend["type"] != "none":
        print(f"📈 TREND ({trend['type']}, last {len(trend['tail'])})")
        print("=" * 40)
        for item in trend["tail"]:
            value = item["value"]
            shown = f"{value:.2f}" if value is not None else "n/a"
            print(f"  {format_timestamp_short(item['timestamp'], tz)}: {shown}")
        print()

    print("📊 VARIABILITY (CV)")
    print("=" * 30)
    for item in report["cvComparison"]:
        cv = item["cv"]
        shown = f"{cv:.1f}%" if cv is not None else "n/a"
        print(f"  {item['metricName']}: {shown}")
    print()

    print(f"🌗 DAY/NIGHT DURATIONS ({report['dayNightPeriodCount']} periods)")
    print("=" * 40)
    for group in report["durations"]:
        print(
            f"  {group['periodLabel']}: "
            f"day {format_duration(group['averageDayDuration'])} "
            f"({group['dayPeriodsCount']}), "
            f"night {format_duration(group['averageNightDuration'])} "
            f"({group['nightPeriodsCount']})"
        )
    print()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Weather sensor analytics report")
    parser.add_argument("--data-file", type=str, required=True, help="JSON export file")
    parser.add_argument("--from", dest="date_from", type=str, help="First day (YYYY-MM-DD)")
    parser.add_argument("--to", dest="date_to", type=str, help="Last day (YYYY-MM-DD)")
    parser.add_argument("--start-time", type=str, default="00:00", help="HH:MM on first day")
    parser.add_argument("--end-time", type=str, default="23:59", help="HH:MM on last day")
    parser.add_argument(
        "--aggregation", choices=AGGREGATION_LEVELS, default="daily"
    )
    parser.add_argument("--metrics", nargs="+", help="Metric keys to report")
    parser.add_argument("--trend", choices=TREND_TYPES, default="none")
    parser.add_argument(
        "--polynomial-order", type=int, default=DEFAULT_POLYNOMIAL_ORDER
    )
    parser.add_argument(
        "--moving-average-period", type=int, default=DEFAULT_MOVING_AVERAGE_PERIOD
    )
    parser.add_argument("--durations", choices=DURATION_LEVELS, default="weekly")
    parser.add_argument("--tz", type=str, default=None, help="IANA timezone name")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    parser.add_argument(
        "--log-level", type=str, help="Log level (default WEATHERLENS_LOG_LEVEL or INFO)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.log_file or args.log_level:
        app_logger(PACKAGE_LOGGER, log_file=args.log_file, level=args.log_level)

    try:
        records = load_records(args.data_file)
        report = build_report(
            records,
            date_from=args.date_from,
            date_to=args.date_to,
            start_time=args.start_time,
            end_time=args.end_time,
            aggregation=args.aggregation,
            metrics=args.metrics,
            trend=args.trend,
            polynomial_order=args.polynomial_order,
            moving_average_period=args.moving_average_period,
            durations=args.durations,
            tz=args.tz,
        )

        if report["pointCount"] == 0:
            print("❌ No valid sensor records found")
            return 0

        print_report(report, tz=args.tz)
        return 0

    except Exception as e:
        logger.exception(f"Error in weather report: {e}")
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
