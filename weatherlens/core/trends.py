"""
Trend overlays for metric series.

Adds a "<metric>_trend" value to every point: either a least-squares fit of
one of the regression families, or a trailing moving average. Fits are done
on (position, value) pairs with one-based positions. A fit that cannot be
computed leaves the series untrended rather than failing the request.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from weatherlens.config import (
    DEFAULT_MOVING_AVERAGE_PERIOD,
    DEFAULT_POLYNOMIAL_ORDER,
    MIN_MOVING_AVERAGE_PERIOD,
    MIN_POLYNOMIAL_ORDER,
    TREND_PRECISION,
    TREND_TYPES,
)
from weatherlens.utils.log_util import app_logger
from weatherlens.utils.stats_utils import to_finite_number

logger = app_logger(__name__)


def trend_key(metric_key: str) -> str:
    return f"{metric_key}_trend"


def _regression_pairs(
    points: List[Dict[str, Any]], metric_key: str, positive_only: bool = False
) -> Tuple[np.ndarray, np.ndarray]:
    xs, ys = [], []
    for index, point in enumerate(points):
        value = to_finite_number(point.get(metric_key))
        if value is None or (positive_only and value <= 0):
            continue
        xs.append(index + 1)
        ys.append(value)
    return np.asarray(xs, dtype=float), np.asarray(ys, dtype=float)


def _fit_linear(x, y, order):
    coeffs = np.polyfit(x, y, 1)
    return lambda xs: np.polyval(coeffs, xs)


def _fit_polynomial(x, y, order):
    # n pairs determine at most a degree n - 1 polynomial
    coeffs = np.polyfit(x, y, min(order, len(x) - 1))
    return lambda xs: np.polyval(coeffs, xs)


def _fit_logarithmic(x, y, order):
    # y = a + b * ln(x)
    b, a = np.polyfit(np.log(x), y, 1)
    return lambda xs: a + b * np.log(xs)


def _fit_exponential(x, y, order):
    # y = a * e^(b * x), fitted on ln(y)
    b, ln_a = np.polyfit(x, np.log(y), 1)
    return lambda xs: np.exp(ln_a) * np.exp(b * xs)


def _fit_power(x, y, order):
    # y = a * x^b, fitted on ln(y) against ln(x)
    b, ln_a = np.polyfit(np.log(x), np.log(y), 1)
    return lambda xs: np.exp(ln_a) * np.power(xs, b)


FITTERS: Dict[str, Callable] = {
    "linear": _fit_linear,
    "logarithmic": _fit_logarithmic,
    "exponential": _fit_exponential,
    "power": _fit_power,
    "polynomial": _fit_polynomial,
}


def fit_regression(
    points: List[Dict[str, Any]],
    metric_key: str,
    trend_type: str,
    polynomial_order: int = DEFAULT_POLYNOMIAL_ORDER,
) -> Optional[List[float]]:
    """
    Fit a regression model and evaluate it at every point position.

    :param points: Points carrying metric_key.
    :param metric_key: Metric to fit.
    :param trend_type: A key of FITTERS.
    :param polynomial_order: Order for polynomial fits (>= 2), lowered to
                             the number of valid pairs minus one.
    :return: Fitted values rounded to TREND_PRECISION, or None if the fit is
             not possible (too few pairs or a degenerate/non-finite result).
    """
    positive_only = trend_type in ("exponential", "power")
    x, y = _regression_pairs(points, metric_key, positive_only=positive_only)
    if len(x) < 2:
        logger.debug(
            f"Skipping {trend_type} trend for {metric_key}: {len(x)} valid pairs"
        )
        return None

    positions = np.arange(1, len(points) + 1, dtype=float)
    try:
        with np.errstate(all="ignore"):
            model = FITTERS[trend_type](x, y, polynomial_order)
            fitted = np.asarray(model(positions), dtype=float)
    except (np.linalg.LinAlgError, ValueError, TypeError) as e:
        logger.warning(f"{trend_type} fit failed for {metric_key}: {e}")
        return None

    if not np.all(np.isfinite(fitted)):
        logger.warning(f"{trend_type} fit for {metric_key} produced non-finite values")
        return None

    return [round(float(v), TREND_PRECISION) for v in fitted]


def moving_average(
    points: List[Dict[str, Any]],
    metric_key: str,
    period: int = DEFAULT_MOVING_AVERAGE_PERIOD,
) -> List[Optional[float]]:
    """
    Trailing moving average over point positions.

    :param points: Points carrying metric_key.
    :param metric_key: Metric to average.
    :param period: Window size; the first period - 1 positions have no value.
    :return: One entry per point; None where the window is incomplete.
    """
    values = pd.Series(
        [to_finite_number(p.get(metric_key)) for p in points], dtype=float
    )
    averaged = values.rolling(window=period, min_periods=period).mean()
    return [
        round(float(v), TREND_PRECISION) if pd.notna(v) else None for v in averaged
    ]


def apply_trend(
    points: List[Dict[str, Any]],
    metric_key: str,
    trend_type: str = "none",
    polynomial_order: int = DEFAULT_POLYNOMIAL_ORDER,
    moving_average_period: int = DEFAULT_MOVING_AVERAGE_PERIOD,
) -> List[Dict[str, Any]]:
    """
    Return copies of points with a "<metric>_trend" overlay.

    :param points: Canonical or aggregated points, in display order.
    :param metric_key: Key of the value to trend (e.g. "temperature_avg").
    :param trend_type: One of TREND_TYPES; "none" is a passthrough.
    :param polynomial_order: Polynomial order, raised to at least 2.
    :param moving_average_period: Moving-average window, raised to at least 2.
    :return: New list of point dicts; untrended copies if the fit fails.
    :raises ValueError: if trend_type is unknown.
    """
    if trend_type not in TREND_TYPES:
        raise ValueError(
            f"Unknown trend type: {trend_type}. Expected one of {TREND_TYPES}"
        )

    result = [dict(p) for p in points]
    if trend_type == "none" or not result:
        return result

    if trend_type == "movingAverage":
        period = max(MIN_MOVING_AVERAGE_PERIOD, int(moving_average_period))
        trend_values = moving_average(result, metric_key, period)
    else:
        order = max(MIN_POLYNOMIAL_ORDER, int(polynomial_order))
        trend_values = fit_regression(result, metric_key, trend_type, order)
        if trend_values is None:
            return result

    key = trend_key(metric_key)
    for point, value in zip(result, trend_values):
        point[key] = value

    logger.debug(f"Applied {trend_type} trend to {metric_key} over {len(result)} points")
    return result
