"""
Tests for the trends module
"""

import logging
import math
import warnings

import numpy as np
import pytest

from weatherlens.core import trends
from weatherlens.core.trends import apply_trend, fit_regression, moving_average


def series(values, key="temperature"):
    return [{"timestamp": i * 1000, key: v} for i, v in enumerate(values)]


def trend_values(points, key="temperature"):
    return [p.get(f"{key}_trend") for p in points]


class TestMovingAverage:
    """Test the trailing moving average."""

    def test_period_three(self):
        """Test that the first period - 1 positions have no average."""
        result = apply_trend(
            series([1, 2, 3, 4, 5]), "temperature", "movingAverage", moving_average_period=3
        )
        assert trend_values(result) == [None, None, 2.0, 3.0, 4.0]

    def test_missing_value_breaks_window(self):
        """Test that windows containing a gap have no average."""
        result = moving_average(series([1, None, 3, 4, 5]), "temperature", 2)
        assert result == [None, None, None, 3.5, 4.5]

    def test_period_clamped_to_two(self):
        """Test that a period below 2 is raised to 2."""
        result = apply_trend(
            series([1, 2, 3]), "temperature", "movingAverage", moving_average_period=1
        )
        assert trend_values(result) == [None, 1.5, 2.5]

    def test_default_period(self):
        """Test the default window of 7."""
        result = apply_trend(series(list(range(1, 9))), "temperature", "movingAverage")
        assert trend_values(result) == [None] * 6 + [4.0, 5.0]


class TestRegressionTrends:
    """Test the regression trend family."""

    def test_linear(self):
        """Test an exact linear fit."""
        result = apply_trend(series([2, 4, 6, 8]), "temperature", "linear")
        assert trend_values(result) == pytest.approx([2, 4, 6, 8])

    def test_linear_skips_gaps(self):
        """Test that missing values are skipped but every position is trended."""
        result = apply_trend(series([1, None, 3]), "temperature", "linear")
        assert trend_values(result) == pytest.approx([1, 2, 3])

    def test_polynomial(self):
        """Test an exact quadratic fit."""
        result = apply_trend(series([2, 5, 10, 17]), "temperature", "polynomial")
        assert trend_values(result) == pytest.approx([2, 5, 10, 17])

    def test_polynomial_order_clamped(self):
        """Test that an order below 2 still fits a quadratic."""
        result = apply_trend(
            series([2, 5, 10, 17]), "temperature", "polynomial", polynomial_order=1
        )
        assert trend_values(result) == pytest.approx([2, 5, 10, 17])

    def test_exponential(self):
        """Test an exact exponential fit."""
        result = apply_trend(series([2, 4, 8, 16]), "temperature", "exponential")
        assert trend_values(result) == pytest.approx([2, 4, 8, 16])

    def test_power(self):
        """Test an exact power fit."""
        result = apply_trend(series([1, 4, 9, 16]), "temperature", "power")
        assert trend_values(result) == pytest.approx([1, 4, 9, 16])

    def test_logarithmic(self):
        """Test an exact logarithmic fit."""
        values = [3 + 2 * math.log(x) for x in range(1, 5)]
        result = apply_trend(series(values), "temperature", "logarithmic")
        assert trend_values(result) == pytest.approx(values, abs=0.01)

    def test_rounded_to_two_decimals(self):
        """Test that fitted values are rounded."""
        result = apply_trend(series([1, 2, 4]), "temperature", "linear")
        for value in trend_values(result):
            assert value == round(value, 2)

    def test_exponential_ignores_non_positive(self):
        """Test that exponential fits only use positive values."""
        result = apply_trend(series([-1, 0, -5]), "temperature", "exponential")
        assert all("temperature_trend" not in p for p in result)

    def test_too_few_pairs(self):
        """Test that fewer than 2 valid values leaves the series untrended."""
        points = series([5, None, "x"])
        result = apply_trend(points, "temperature", "linear")
        assert result == points
        assert fit_regression(points, "temperature", "linear") is None


class TestApplyTrend:
    """Test the trend entry point."""

    def test_none_returns_copies(self):
        """Test that "none" passes copies through."""
        points = series([1, 2, 3])
        result = apply_trend(points, "temperature", "none")
        assert result == points
        assert result[0] is not points[0]

    def test_input_not_mutated(self):
        """Test that the caller's points are left untouched."""
        points = series([2, 4, 6])
        apply_trend(points, "temperature", "linear")
        assert all("temperature_trend" not in p for p in points)

    def test_aggregated_key(self):
        """Test trending an aggregated series key."""
        points = series([1, 2, 3], key="temperature_avg")
        result = apply_trend(points, "temperature_avg", "linear")
        assert trend_values(result, "temperature_avg") == pytest.approx([1, 2, 3])

    def test_empty(self):
        """Test empty input."""
        assert apply_trend([], "temperature", "linear") == []

    def test_unknown_type(self):
        """Test that an unknown trend type raises ValueError."""
        with pytest.raises(ValueError, match="Unknown trend type"):
            apply_trend(series([1, 2]), "temperature", "cubic-spline")


class TestFitFailures:
    """Test that failed fits leave the series untrended."""

    def test_non_finite_fit(self, caplog):
        """Test that an overflowing exponential curve is discarded."""
        points = series([1, 1e150, 1e300])

        with caplog.at_level(logging.WARNING):
            result = apply_trend(points, "temperature", "exponential")

        assert result == points
        assert all("temperature_trend" not in p for p in result)
        assert "non-finite" in caplog.text

    def test_numpy_error(self, monkeypatch, caplog):
        """Test that a numpy error during fitting is caught and logged."""

        def singular_fit(x, y, order):
            raise np.linalg.LinAlgError("SVD did not converge")

        monkeypatch.setitem(trends.FITTERS, "linear", singular_fit)
        points = series([1, 2, 3])

        with caplog.at_level(logging.WARNING):
            result = apply_trend(points, "temperature", "linear")

        assert result == points
        assert "linear fit failed" in caplog.text

    def test_polynomial_order_above_pairs(self):
        """Test that a high order on few values lowers the degree without warnings."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = apply_trend(
                series([1, None, 3]), "temperature", "polynomial", polynomial_order=5
            )

        assert trend_values(result) == pytest.approx([1, 2, 3])
