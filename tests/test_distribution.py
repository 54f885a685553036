"""
Tests for the distribution module
"""

import pytest

from weatherlens.core.distribution import (
    axis_domain,
    coefficient_of_variation,
    cv_comparison,
    histogram,
    histogram_bin_count,
    padded_max_domain,
    padded_min_domain,
    y_axis_domain,
)


class TestHistogram:
    """Test histogram binning."""

    def test_identical_values(self):
        """Test that equal values collapse into one bin."""
        bins = histogram([10, 10, 10])
        assert len(bins) == 1
        assert bins[0].range == "10.00"
        assert bins[0].count == 3

    def test_identical_values_with_unit(self):
        """Test the unit suffix on a single-value bin."""
        bins = histogram([10, 10], unit="°C")
        assert bins[0].range == "10.00 °C"

    @pytest.mark.parametrize("values", [[], [5], [5, None, "x"]])
    def test_insufficient_values(self, values):
        """Test that fewer than 2 finite values gives no histogram."""
        assert histogram(values) is None

    def test_uniform_bins(self):
        """Test bin edges, labels and counts for 1..10."""
        bins = histogram(list(range(1, 11)))

        assert [b.range for b in bins] == ["1.0-4.0", "4.0-7.0", "7.0-10.0"]
        assert [b.count for b in bins] == [3, 3, 4]

    def test_counts_cover_all_values(self):
        """Test that every finite value lands in exactly one bin."""
        values = [0.1 * i for i in range(57)] + [None, "bad"]
        bins = histogram(values)
        assert sum(b.count for b in bins) == 57

    def test_empty_bins_dropped(self):
        """Test that empty bins are removed."""
        bins = histogram([0, 0, 0, 100])
        assert [b.count for b in bins] == [3, 1]

    @pytest.mark.parametrize(
        "n_values, expected", [(2, 3), (9, 3), (16, 4), (99, 9), (100, 10), (400, 10)]
    )
    def test_bin_count(self, n_values, expected):
        """Test floor(sqrt(N)) clamped to [3, 10]."""
        assert histogram_bin_count(n_values) == expected

    def test_to_dict(self):
        """Test the serialized bin shape."""
        data = histogram([10, 10])[0].to_dict()
        assert set(data) == {"range", "min", "max", "count"}


class TestCoefficientOfVariation:
    """Test the coefficient of variation."""

    def test_one_to_ten(self):
        """Test population CV for 1..10."""
        assert coefficient_of_variation(range(1, 11)) == pytest.approx(52.22, abs=0.1)

    def test_constant_values(self):
        """Test that constant data has zero variation."""
        assert coefficient_of_variation([4, 4]) == 0.0

    @pytest.mark.parametrize("values", [[], [5], [-1, 1], [-3, -1], [0, 0]])
    def test_undefined(self, values):
        """Test that too few values or a non-positive mean gives None."""
        assert coefficient_of_variation(values) is None

    def test_comparison(self):
        """Test CV comparison across metrics, skipping string metrics."""
        points = [
            {"temperature": 10, "humidity": 50, "precipitation": "Rain"},
            {"temperature": 20, "humidity": 50, "precipitation": "No Rain"},
        ]
        result = cv_comparison(points, ["temperature", "humidity", "precipitation"])

        assert [r["metricName"] for r in result] == ["Temperature", "Humidity"]
        assert result[0]["cv"] == pytest.approx(100 / 3)
        assert result[1]["cv"] == 0.0


class TestAxisDomain:
    """Test the padded chart axis domain."""

    @pytest.mark.parametrize(
        "data_min, data_max, expected",
        [
            (0, 25, (-10, 30)),
            (5, 8, (-10, 11)),
            (0, 0, (-10, 10)),
            (10, 500, (-15, 575)),
            (25, 210, (-2, 242)),
            (100, 200, (85, 230)),
            (-20, -5, (-23, -2)),
            (-500, 5, (-575, 30)),
            (40, 45, (34, 52)),
        ],
    )
    def test_domain_table(self, data_min, data_max, expected):
        """Test the padding decision table."""
        assert axis_domain(data_min, data_max) == expected

    def test_results_are_integers(self):
        """Test that padded bounds are whole numbers."""
        assert isinstance(padded_min_domain(33.3, 47.1), int)
        assert isinstance(padded_max_domain(47.1, 33.3), int)

    def test_y_axis_domain(self):
        """Test the domain over several metrics, ignoring string metrics."""
        points = [
            {"temperature": 0, "humidity": 25, "precipitation": "Rain"},
            {"temperature": 5, "humidity": None, "precipitation": "No Rain"},
        ]
        assert y_axis_domain(points, ["temperature", "humidity", "precipitation"]) == (
            -10,
            30,
        )

    def test_y_axis_domain_without_data(self):
        """Test the default domain when nothing numeric is selected."""
        assert y_axis_domain([], ["temperature"]) == (0, 10)
        assert y_axis_domain([{"precipitation": "Rain"}], ["precipitation"]) == (0, 10)
