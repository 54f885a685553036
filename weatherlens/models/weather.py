"""
Weather analysis models and type definitions.

This module provides the structured result types produced by the analysis
core. Canonical and aggregated points stay plain dictionaries keyed by metric
name; the shapes below are fixed and carry a to_dict() for the camelCase form
consumed by the rendering layer.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class MetricConfig:
    """Display and validation descriptor for one metric."""

    name: str
    unit: str
    color: str
    healthy_min: Optional[float] = None
    healthy_max: Optional[float] = None
    is_string: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "unit": self.unit,
            "color": self.color,
            "healthyMin": self.healthy_min,
            "healthyMax": self.healthy_max,
            "isString": self.is_string,
        }


@dataclass
class DayNightPeriod:
    """A maximal run of consecutive points sharing a day/night classification."""

    type: str
    start_timestamp: int
    end_timestamp: int
    duration: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "startTimestamp": self.start_timestamp,
            "endTimestamp": self.end_timestamp,
            "duration": self.duration,
        }


@dataclass
class AggregatedDurationData:
    """Day/night periods regrouped by calendar window."""

    period_label: str
    average_day_duration: float
    average_night_duration: float
    day_periods_count: int
    night_periods_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "periodLabel": self.period_label,
            "averageDayDuration": self.average_day_duration,
            "averageNightDuration": self.average_night_duration,
            "dayPeriodsCount": self.day_periods_count,
            "nightPeriodsCount": self.night_periods_count,
        }


@dataclass
class SummaryStats:
    """Summary statistics over the valid samples of one metric."""

    avg: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    std_dev: Optional[float] = None
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg": self.avg,
            "min": self.min,
            "max": self.max,
            "stdDev": self.std_dev,
            "count": self.count,
        }


@dataclass
class HistogramBin:
    """One histogram bin; range is the display label."""

    range: str
    min: float
    max: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DetailModalData:
    """Statistics snapshot for one metric within one aggregation bucket."""

    metric_key: str
    metric_config: MetricConfig
    aggregation_label: str
    stats: SummaryStats
    raw_points: List[Dict[str, Any]] = field(default_factory=list)
    histogram: Optional[List[HistogramBin]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metricKey": self.metric_key,
            "metricConfig": self.metric_config.to_dict(),
            "aggregationLabel": self.aggregation_label,
            "stats": self.stats.to_dict(),
            "rawPoints": [dict(p) for p in self.raw_points],
            "histogram": (
                [b.to_dict() for b in self.histogram]
                if self.histogram is not None
                else None
            ),
        }


@dataclass
class DailyMetricTrend:
    """Today's snapshot of one metric: latest reading plus day extremes."""

    latest: Any = None
    min: Optional[float] = None
    max: Optional[float] = None
    average: Optional[float] = None
    sparkline: List[Tuple[int, Optional[float]]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latest": self.latest,
            "min": self.min,
            "max": self.max,
            "average": self.average,
            "sparklineData": [
                {"timestamp": ts, "value": value} for ts, value in self.sparkline
            ],
        }
