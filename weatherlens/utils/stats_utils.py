"""
Shared numeric helpers: safe coercion, mean, population standard deviation
and summary statistics over possibly sparse metric values.
"""

import math
from numbers import Number
from typing import Any, Iterable, List, Optional

import numpy as np
import pandas as pd

from weatherlens.models.weather import SummaryStats


def to_finite_number(value: Any) -> Optional[float]:
    """
    Coerce a raw field to a finite float.

    Numbers and numeric strings are accepted; booleans, blanks, NaN/inf,
    values too large for a float, complex numbers and any other type come
    back as None.

    :param value: Raw field value.
    :return: float or None when the value is absent or not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, Number):
            number = float(value)
        elif isinstance(value, str):
            if not value.strip():
                return None
            number = float(pd.to_numeric(value.strip(), errors="coerce"))
        else:
            return None
    except (OverflowError, TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def finite_values(values: Iterable[Any]) -> List[float]:
    """Keep only the values that coerce to finite numbers."""
    result = []
    for value in values:
        number = to_finite_number(value)
        if number is not None:
            result.append(number)
    return result


def mean(values: Iterable[Any]) -> Optional[float]:
    """Arithmetic mean of the finite values, or None when there are none."""
    numbers = finite_values(values)
    if not numbers:
        return None
    return float(np.mean(numbers))


def std_dev(values: Iterable[Any]) -> float:
    """
    Population standard deviation (divide by N) of the finite values.

    Fewer than two samples is defined as 0.
    """
    numbers = finite_values(values)
    if len(numbers) < 2:
        return 0.0
    return float(np.std(numbers))


def summarize_values(values: Iterable[Any]) -> SummaryStats:
    """
    Summary statistics over the finite values.

    :param values: Raw metric values, possibly containing gaps.
    :return: SummaryStats; avg/min/max/std_dev are None when count is 0.
    """
    numbers = finite_values(values)
    if not numbers:
        return SummaryStats(count=0)
    arr = np.asarray(numbers, dtype=float)
    return SummaryStats(
        avg=float(arr.mean()),
        min=float(arr.min()),
        max=float(arr.max()),
        std_dev=float(arr.std()) if len(arr) >= 2 else 0.0,
        count=len(numbers),
    )
