"""
Day/Night Period Segmentation

Pure functions that split a canonical point series into alternating day and
night runs, and regroup those runs by calendar window to compare average day
and night lengths over time.
"""

from datetime import timedelta
from typing import Any, Dict, List

import pandas as pd

from weatherlens.config import DURATION_LEVELS, SUNRISE
from weatherlens.models.weather import AggregatedDurationData, DayNightPeriod
from weatherlens.utils.date_util import TimezoneLike, epoch_ms_to_local
from weatherlens.utils.log_util import app_logger

logger = app_logger(__name__)

DAY = "Day"
NIGHT = "Night"


def classify_point(point: Dict[str, Any]) -> str:
    """Day when the point's light reading was classified as sunrise."""
    return DAY if point.get("sunriseSunset") == SUNRISE else NIGHT


def segment_day_night_periods(points: List[Dict[str, Any]]) -> List[DayNightPeriod]:
    """
    Split points into maximal runs sharing the same day/night classification.

    The boundary point's timestamp closes the previous run and opens the next,
    so consecutive periods always touch. The last run closes at the final
    point's timestamp.

    :param points: Canonical points sorted ascending by timestamp.
    :return: Ordered, contiguous list of DayNightPeriod.
    """
    periods: List[DayNightPeriod] = []
    if not points:
        return periods

    current_type = classify_point(points[0])
    current_start = points[0]["timestamp"]

    for point in points[1:]:
        point_type = classify_point(point)
        if point_type == current_type:
            continue
        boundary = point["timestamp"]
        periods.append(
            DayNightPeriod(
                type=current_type,
                start_timestamp=current_start,
                end_timestamp=boundary,
                duration=boundary - current_start,
            )
        )
        current_type = point_type
        current_start = boundary

    last = points[-1]["timestamp"]
    periods.append(
        DayNightPeriod(
            type=current_type,
            start_timestamp=current_start,
            end_timestamp=last,
            duration=last - current_start,
        )
    )

    logger.debug(f"Segmented {len(points)} points into {len(periods)} day/night periods")
    return periods


def duration_group_label(timestamp: int, level: str, tz: TimezoneLike = None) -> str:
    """
    Calendar window label for a period starting at timestamp.

    :param timestamp: Period start, epoch milliseconds.
    :param level: weekly (weeks start on Sunday), monthly or annually.
    :param tz: Timezone the calendar is read in.
    :return: e.g. "Week of 2024-01-07", "January 2024" or "2024".
    """
    local = epoch_ms_to_local(timestamp, tz)
    if level == "weekly":
        # isoweekday: Monday=1 .. Sunday=7
        week_start = local.date() - timedelta(days=local.isoweekday() % 7)
        return f"Week of {week_start.isoformat()}"
    if level == "monthly":
        return local.strftime("%B %Y")
    if level == "annually":
        return local.strftime("%Y")
    raise ValueError(
        f"Unknown duration aggregation level: {level}. Expected one of {DURATION_LEVELS}"
    )


def aggregate_durations(
    periods: List[DayNightPeriod], level: str, tz: TimezoneLike = None
) -> List[AggregatedDurationData]:
    """
    Regroup day/night periods by calendar window.

    :param periods: Periods from segment_day_night_periods.
    :param level: weekly, monthly or annually.
    :param tz: Timezone the calendar is read in.
    :return: One entry per window, in first-seen order; averages are 0 when a
             window has no periods of that type.
    :raises ValueError: if level is unknown.
    """
    if level not in DURATION_LEVELS:
        raise ValueError(
            f"Unknown duration aggregation level: {level}. Expected one of {DURATION_LEVELS}"
        )
    if not periods:
        return []

    df = pd.DataFrame(
        {
            "label": [duration_group_label(p.start_timestamp, level, tz) for p in periods],
            "type": [p.type for p in periods],
            "duration": [p.duration for p in periods],
        }
    )

    results = []
    for label, group in df.groupby("label", sort=False):
        day = group.loc[group["type"] == DAY, "duration"]
        night = group.loc[group["type"] != DAY, "duration"]
        results.append(
            AggregatedDurationData(
                period_label=label,
                average_day_duration=float(day.mean()) if len(day) else 0.0,
                average_night_duration=float(night.mean()) if len(night) else 0.0,
                day_periods_count=int(len(day)),
                night_periods_count=int(len(night)),
            )
        )

    logger.info(f"Aggregated {len(periods)} periods into {len(results)} {level} groups")
    return results
