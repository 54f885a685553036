"""
Today's snapshot for each metric: the latest reading plus the current local
day's extremes, average and sparkline.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from weatherlens.config import METRIC_CONFIGS
from weatherlens.models.weather import DailyMetricTrend, MetricConfig
from weatherlens.utils.date_util import TimezoneLike, epoch_ms_to_local, resolve_timezone
from weatherlens.utils.log_util import app_logger
from weatherlens.utils.stats_utils import summarize_values, to_finite_number

logger = app_logger(__name__)


def _local_today(now: Optional[datetime], tz: TimezoneLike):
    zone = resolve_timezone(tz)
    if now is None:
        return datetime.now(zone).date()
    if now.tzinfo is not None:
        return now.astimezone(zone).date()
    return now.date()


def summarize_today(
    points: List[Dict[str, Any]],
    metric_configs: Optional[Dict[str, MetricConfig]] = None,
    now: Optional[datetime] = None,
    tz: TimezoneLike = None,
) -> Dict[str, Any]:
    """
    Build the per-metric "today" snapshot.

    :param points: Canonical points sorted ascending by timestamp.
    :param metric_configs: Metric table.
    :param now: Reference time; naive values are local wall clock. Defaults to now.
    :param tz: Timezone the calendar day is read in.
    :return: {"lastUpdatedTimestamp": int | None, "metrics": {key: DailyMetricTrend}}
    """
    if not points:
        logger.info("No points available for today's summary")
        return {"lastUpdatedTimestamp": None, "metrics": {}}

    configs = metric_configs or METRIC_CONFIGS
    latest = points[-1]
    today = _local_today(now, tz)
    today_points = [
        p for p in points if epoch_ms_to_local(p["timestamp"], tz).date() == today
    ]

    metrics = {}
    for key, config in configs.items():
        trend = DailyMetricTrend(latest=latest.get(key))
        if not config.is_string and today_points:
            values = [to_finite_number(p.get(key)) for p in today_points]
            stats = summarize_values(values)
            trend.min = stats.min
            trend.max = stats.max
            trend.average = stats.avg
            trend.sparkline = [
                (p["timestamp"], value) for p, value in zip(today_points, values)
            ]
        metrics[key] = trend

    logger.debug(f"Today's summary covers {len(today_points)} of {len(points)} points")
    return {"lastUpdatedTimestamp": latest["timestamp"], "metrics": metrics}
