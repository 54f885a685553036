"""
Distribution statistics for metric values.

Histogram binning, coefficient of variation (single metric and across
metrics), and the padded axis domain used by charts. The padding heuristic is
a fixed decision table on (sign of min, magnitude of max, range width); its
exact integer outputs are part of the chart contract.
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from weatherlens.config import (
    DEFAULT_AXIS_DOMAIN,
    HISTOGRAM_EDGE_EPSILON,
    MAX_HISTOGRAM_BINS,
    METRIC_CONFIGS,
    MIN_HISTOGRAM_BINS,
)
from weatherlens.models.weather import HistogramBin, MetricConfig
from weatherlens.utils.log_util import app_logger
from weatherlens.utils.stats_utils import finite_values, mean, std_dev

logger = app_logger(__name__)


# ========================================
# Histogram
# ========================================
def histogram_bin_count(n_values: int) -> int:
    """floor(sqrt(N)) clamped to [MIN_HISTOGRAM_BINS, MAX_HISTOGRAM_BINS]."""
    return min(MAX_HISTOGRAM_BINS, max(MIN_HISTOGRAM_BINS, int(math.sqrt(n_values))))


def histogram(values: Iterable[Any], unit: str = "") -> Optional[List[HistogramBin]]:
    """
    Bin finite values into uniform-width bins.

    :param values: Metric values; non-finite entries are ignored.
    :param unit: Unit appended to the single-bin label.
    :return: Non-empty bins, or None when fewer than 2 finite values exist.
    """
    numbers = finite_values(values)
    if len(numbers) < 2:
        logger.debug("Not enough numeric values for histogram (need at least 2)")
        return None

    arr = np.asarray(numbers, dtype=float)
    data_min = float(arr.min())
    data_max = float(arr.max())

    if data_min == data_max:
        label = f"{data_min:.2f} {unit}".strip()
        return [HistogramBin(range=label, min=data_min, max=data_max, count=len(numbers))]

    num_bins = histogram_bin_count(len(numbers))
    bin_width = (data_max - data_min) / num_bins
    if bin_width <= 0:
        logger.debug("Bin width is zero or negative; cannot create bins")
        return None

    bins = []
    for i in range(num_bins):
        bin_start = data_min + i * bin_width
        bin_end = data_min + (i + 1) * bin_width
        bins.append(
            HistogramBin(
                range=f"{bin_start:.1f}-{bin_end:.1f}",
                min=bin_start,
                max=bin_end,
                count=0,
            )
        )

    last = len(bins) - 1
    for value in numbers:
        for i, b in enumerate(bins):
            in_bin = value < b.max or (
                i == last and value <= b.max + HISTOGRAM_EDGE_EPSILON
            )
            if value >= b.min and in_bin:
                b.count += 1
                break

    return [b for b in bins if b.count > 0 or len(bins) == 1]


# ========================================
# Dispersion
# ========================================
def coefficient_of_variation(values: Iterable[Any]) -> Optional[float]:
    """
    Population standard deviation over mean, as a percentage.

    :param values: Metric values; non-finite entries are ignored.
    :return: CV percent, or None with fewer than 2 values or a mean <= 0.
    """
    numbers = finite_values(values)
    if len(numbers) < 2:
        return None
    avg = mean(numbers)
    if avg is None or avg <= 0:
        return None
    return std_dev(numbers) / avg * 100


def cv_comparison(
    points: List[Dict[str, Any]],
    metrics: List[str],
    metric_configs: Optional[Dict[str, MetricConfig]] = None,
) -> List[Dict[str, Any]]:
    """
    Coefficient of variation for each selected numeric metric.

    :param points: Canonical (or aggregated) points.
    :param metrics: Metric keys to compare.
    :param metric_configs: Metric table; string metrics are skipped.
    :return: List of {"metricName", "cv"} in the order of metrics.
    """
    configs = metric_configs or METRIC_CONFIGS
    comparison = []
    for key in metrics:
        cfg = configs.get(key)
        if cfg is not None and cfg.is_string:
            continue
        comparison.append(
            {
                "metricName": cfg.name if cfg else key,
                "cv": coefficient_of_variation(p.get(key) for p in points),
            }
        )
    return comparison


# ========================================
# Axis domain padding
# ========================================
def padded_min_domain(data_min: float, data_max: float) -> int:
    """Lower chart bound for data spanning [data_min, data_max]."""
    data_range = data_max - data_min

    if 0 <= data_min <= 30:
        if data_range <= 200 and data_max <= 200:
            padded_min = -10
        else:
            proportional_padding = max(10, 0.05 * data_max)
            padded_min = math.floor(data_min - proportional_padding)
            if padded_min > -2:
                padded_min = -2
    elif data_min > 30:
        padding = max(5, 0.15 * data_min)
        padded_min = math.floor(data_min - padding)
    else:
        padding = max(3, 0.15 * abs(data_min))
        padded_min = math.floor(data_min - padding)
        if padded_min > 0:
            padded_min = 0
    return padded_min


def padded_max_domain(data_max: float, data_min: float) -> int:
    """Upper chart bound for data spanning [data_min, data_max]."""
    data_range = data_max - data_min

    if 0 <= data_max < 10:
        if data_range <= 200 and data_min >= -100:
            padded_max = math.ceil(
                data_max + max(3, 0.5 * (data_max - max(0, data_min) + 3))
            )
            if data_max == 0 and padded_max < 10:
                padded_max = 10
        else:
            proportional_padding = max(10, 0.05 * abs(data_min))
            padded_max = math.ceil(data_max + proportional_padding)
    elif data_max >= 10:
        padding = max(5, 0.15 * data_max)
        padded_max = math.ceil(data_max + padding)
    else:
        padding = max(3, 0.15 * abs(data_max))
        padded_max = math.ceil(data_max + padding)
    return padded_max


def axis_domain(data_min: float, data_max: float) -> Tuple[int, int]:
    """Padded (min, max) chart bounds."""
    return padded_min_domain(data_min, data_max), padded_max_domain(data_max, data_min)


def y_axis_domain(
    points: List[Dict[str, Any]],
    metrics: List[str],
    metric_configs: Optional[Dict[str, MetricConfig]] = None,
) -> Tuple[int, int]:
    """
    Padded y-axis domain across every selected numeric metric.

    :param points: Points being charted.
    :param metrics: Data keys plotted on the axis.
    :param metric_configs: Metric table; string metrics are ignored.
    :return: (min, max); DEFAULT_AXIS_DOMAIN when there is nothing numeric.
    """
    configs = metric_configs or METRIC_CONFIGS
    values: List[float] = []
    for key in metrics:
        cfg = configs.get(key)
        if cfg is not None and cfg.is_string:
            continue
        values.extend(finite_values(p.get(key) for p in points))

    if not values:
        return DEFAULT_AXIS_DOMAIN

    return axis_domain(min(values), max(values))
