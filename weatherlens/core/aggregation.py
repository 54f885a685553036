"""
Time-bucket aggregation of canonical sensor points.

Groups points into calendar-aligned buckets (hour, day, ISO week, month) in
local time and computes per-metric mean, min, max and population standard
deviation. Also builds the statistics snapshot for one metric within one
bucket, used by detail/histogram views.
"""

from typing import Any, Dict, List, Optional

import pandas as pd

from weatherlens.config import AGGREGATION_LEVELS, METRIC_CONFIGS
from weatherlens.core.distribution import histogram
from weatherlens.models.weather import DetailModalData, MetricConfig, SummaryStats
from weatherlens.utils.date_util import TimezoneLike, epoch_ms_to_local
from weatherlens.utils.log_util import app_logger
from weatherlens.utils.stats_utils import summarize_values, to_finite_number

logger = app_logger(__name__)


def _validate_period(period: Optional[str]) -> str:
    if period is None:
        return "raw"
    if period not in AGGREGATION_LEVELS:
        raise ValueError(
            f"Unknown aggregation level: {period}. Expected one of {AGGREGATION_LEVELS}"
        )
    return period


def bucket_label(timestamp: int, period: str, tz: TimezoneLike = None) -> str:
    """
    Label of the local calendar bucket a timestamp falls into.

    Labels are unique per bucket, so they double as grouping keys.

    :param timestamp: Epoch milliseconds.
    :param period: One of hourly, daily, weekly, monthly.
    :param tz: Timezone the calendar is read in.
    :return: Bucket label, e.g. "05/01/2024" for daily.
    """
    local = epoch_ms_to_local(timestamp, tz)
    if period == "hourly":
        return local.strftime("%d/%m/%Y %H:00")
    if period == "daily":
        return local.strftime("%d/%m/%Y")
    if period == "weekly":
        iso_year, iso_week, _ = local.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if period == "monthly":
        return local.strftime("%b %Y")
    raise ValueError(f"Cannot derive a bucket for aggregation level: {period}")


def _resolve_metrics(
    metrics: Optional[List[str]], metric_configs: Dict[str, MetricConfig]
) -> List[str]:
    if metrics is None:
        return [key for key, cfg in metric_configs.items() if not cfg.is_string]

    numeric = []
    for key in metrics:
        cfg = metric_configs.get(key)
        if cfg is not None and cfg.is_string:
            logger.debug(f"Skipping string metric {key} in aggregation")
            continue
        numeric.append(key)
    return numeric


def aggregate_points(
    points: List[Dict[str, Any]],
    period: Optional[str],
    metrics: Optional[List[str]] = None,
    metric_configs: Optional[Dict[str, MetricConfig]] = None,
    tz: TimezoneLike = None,
) -> List[Dict[str, Any]]:
    """
    Aggregate canonical points into calendar buckets.

    :param points: Canonical points (sorted ascending by timestamp).
    :param period: raw, hourly, daily, weekly or monthly; raw/None passes
                   the points through unchanged.
    :param metrics: Metric keys to aggregate; defaults to every numeric metric.
    :param metric_configs: Metric table; string metrics are never aggregated.
    :param tz: Timezone the calendar is read in.
    :return: List of aggregated points sorted by each bucket's first timestamp.
    :raises ValueError: if the aggregation level is unknown.
    """
    period = _validate_period(period)
    if period == "raw":
        return [dict(p) for p in points]

    if not points:
        logger.info("No points provided for aggregation")
        return []

    configs = metric_configs or METRIC_CONFIGS
    metric_keys = _resolve_metrics(metrics, configs)

    df = pd.DataFrame(
        {
            "timestamp": [p["timestamp"] for p in points],
            "timestampDisplay": [
                bucket_label(p["timestamp"], period, tz) for p in points
            ],
        }
    )
    # Same coercion as the detail snapshot so bucket counts agree
    for key in metric_keys:
        df[key] = pd.Series(
            [to_finite_number(p.get(key)) for p in points], dtype=float
        )

    grouped = df.groupby("timestampDisplay", sort=False)
    first_seen = grouped["timestamp"].first()
    sizes = grouped.size()

    stats = {}
    if metric_keys:
        stats = {
            "avg": grouped[metric_keys].mean(),
            "min": grouped[metric_keys].min(),
            "max": grouped[metric_keys].max(),
            "stdDev": grouped[metric_keys].std(ddof=0),
            "count": grouped[metric_keys].count(),
        }

    results = []
    for label in first_seen.sort_values(kind="stable").index:
        bucket: Dict[str, Any] = {
            "timestamp": int(first_seen[label]),
            "timestampDisplay": label,
            "aggregationPeriod": period,
            "count": int(sizes[label]),
        }
        for key in metric_keys:
            valid = int(stats["count"].at[label, key])
            if valid == 0:
                continue
            bucket[f"{key}_avg"] = float(stats["avg"].at[label, key])
            bucket[f"{key}_min"] = float(stats["min"].at[label, key])
            bucket[f"{key}_max"] = float(stats["max"].at[label, key])
            # pandas gives 0.0 for a single sample with ddof=0
            std = stats["stdDev"].at[label, key]
            bucket[f"{key}_stdDev"] = float(std) if pd.notna(std) else 0.0
            bucket[f"{key}_count"] = valid
        results.append(bucket)

    logger.info(
        f"Aggregated {len(points)} points into {len(results)} {period} buckets"
    )
    return results


def points_in_bucket(
    points: List[Dict[str, Any]], label: str, period: str, tz: TimezoneLike = None
) -> List[Dict[str, Any]]:
    """Canonical points whose bucket label matches label."""
    period = _validate_period(period)
    if period == "raw":
        return [p for p in points if str(p["timestamp"]) == str(label)]
    return [p for p in points if bucket_label(p["timestamp"], period, tz) == label]


def build_detail_data(
    points: List[Dict[str, Any]],
    metric_key: str,
    label: str,
    period: str,
    metric_configs: Optional[Dict[str, MetricConfig]] = None,
    tz: TimezoneLike = None,
) -> DetailModalData:
    """
    Statistics snapshot for one metric within one aggregation bucket.

    :param points: Canonical points the bucket was aggregated from.
    :param metric_key: Metric to summarize.
    :param label: Bucket label (timestampDisplay of the aggregated point).
    :param period: Aggregation level the label belongs to.
    :param metric_configs: Metric table.
    :param tz: Timezone the calendar is read in.
    :return: DetailModalData with stats, contributing points and histogram.
    """
    configs = metric_configs or METRIC_CONFIGS
    config = configs.get(metric_key) or MetricConfig(
        name=metric_key, unit="", color="hsl(var(--primary))"
    )

    contributing = points_in_bucket(points, label, period, tz)

    if config.is_string:
        stats = SummaryStats(
            count=sum(1 for p in contributing if p.get(metric_key) is not None)
        )
        chart = None
    else:
        values = [p.get(metric_key) for p in contributing]
        stats = summarize_values(values)
        chart = histogram(values, unit=config.unit)

    logger.debug(
        f"Detail for {metric_key} in {label}: {len(contributing)} points, "
        f"{stats.count} valid"
    )
    return DetailModalData(
        metric_key=metric_key,
        metric_config=config,
        aggregation_label=label,
        stats=stats,
        raw_points=[dict(p) for p in contributing],
        histogram=chart,
    )
