"""
Tests for descriptive statistics and per-point transforms.

Tests cover:
- Mean, median and population std
- Single-value and empty inputs
- Percentage change, including division by zero
- Moving average window discipline
"""

import math
import pytest
from macrodash.entities import DataPoint, MergedSeries, Statistics
from macrodash.errors import InsufficientDataError
from macrodash.analytics.statistics import (
    mean, median, population_std, compute_statistics, coefficient_of_variation
)
from macrodash.analytics.transforms import (
    pct_change, pct_change_series, change_heatmap, moving_average
)


class TestComputeStatistics:
    """Tests for compute_statistics function."""

    def test_basic_statistics(self):
        stats = compute_statistics([2, 4, 4, 4, 5, 5, 7, 9])
        assert stats.mean == 5.0
        assert stats.median == 4.5
        assert stats.std == 2.0  # population std
        assert stats.min == 2
        assert stats.max == 9

    def test_odd_count_median(self):
        assert median([3, 1, 2]) == 2

    def test_single_value(self):
        stats = compute_statistics([5])
        assert stats == Statistics(mean=5, median=5, std=0.0, min=5, max=5)

    def test_empty_raises(self):
        with pytest.raises(InsufficientDataError):
            compute_statistics([])
        with pytest.raises(InsufficientDataError):
            mean([])
        with pytest.raises(InsufficientDataError):
            median([])

    def test_deterministic(self):
        values = [0.1, 0.7, 1.3, 2.9, 0.2]
        assert compute_statistics(values) == compute_statistics(values)

    def test_population_not_sample(self):
        assert population_std([1, 3]) == 1.0

    def test_coefficient_of_variation(self):
        stats = compute_statistics([90, 110])
        assert coefficient_of_variation(stats) == pytest.approx(10.0)

    def test_coefficient_of_variation_zero_mean(self):
        stats = compute_statistics([-1, 1])
        assert math.isnan(stats.coefficient_of_variation)


class TestPctChange:
    """Tests for pct_change and pct_change_series."""

    def test_basic(self):
        assert pct_change(100, 110) == pytest.approx(10.0)
        assert pct_change(200, 150) == pytest.approx(-25.0)

    def test_zero_prev(self):
        assert pct_change(0, 5) == math.inf
        assert pct_change(0, -5) == -math.inf
        assert math.isnan(pct_change(0, 0))

    def test_series_length_and_dates(self):
        points = [DataPoint("2024-01-01", 100), DataPoint("2024-02-01", 110), DataPoint("2024-03-01", 99)]
        changes = pct_change_series(points)
        assert len(changes) == 2
        assert [c.date for c in changes] == ["2024-02-01", "2024-03-01"]
        assert changes[0].value == pytest.approx(10.0)
        assert changes[1].value == pytest.approx(-10.0)

    def test_series_short_inputs(self):
        assert pct_change_series([]) == []
        assert pct_change_series([DataPoint("2024-01-01", 1)]) == []

    def test_change_heatmap(self):
        points = [
            DataPoint("2023-12-01", 100), DataPoint("2024-01-01", 102), DataPoint("2024-02-01", 51),
        ]
        grid = change_heatmap(points)
        assert set(grid) == {"2024"}
        assert grid["2024"]["01"] == pytest.approx(2.0)
        assert grid["2024"]["02"] == pytest.approx(-50.0)


class TestMovingAverage:
    """Tests for moving_average function."""

    def _series(self, values):
        return MergedSeries([
            {"date": f"2024-{i + 1:02d}-01", "v": v} for i, v in enumerate(values)
        ])

    def test_window_discipline(self):
        result = moving_average(self._series([1, 2, 3, 4, 5]), "v", 3)
        assert "v_ma3" not in result[0]
        assert "v_ma3" not in result[1]
        assert result.column("v_ma3")[2:] == [2.0, 3.0, 4.0]

    def test_gap_leaves_field_absent(self):
        """A missing value makes every window that covers it absent."""
        series = MergedSeries([
            {"date": "2024-01-01", "v": 1.0},
            {"date": "2024-02-01", "v": 2.0},
            {"date": "2024-03-01", "other": 9.0},
            {"date": "2024-04-01", "v": 4.0},
            {"date": "2024-05-01", "v": 5.0},
            {"date": "2024-06-01", "v": 6.0},
        ])
        result = moving_average(series, "v", 2)
        assert result.column("v_ma2") == [None, 1.5, None, None, 4.5, 5.5]

    def test_window_larger_than_series(self):
        result = moving_average(self._series([1, 2]), "v", 5)
        assert "v_ma5" not in result.variables

    def test_windows_compose(self):
        series = self._series([1, 2, 3, 4, 5, 6])
        result = moving_average(moving_average(series, "v", 3), "v", 2)
        assert result.column("v_ma3")[-1] == 5.0
        assert result.column("v_ma2")[-1] == 5.5
        assert result.values("v") == [1, 2, 3, 4, 5, 6]

    def test_input_unchanged(self):
        series = self._series([1, 2, 3])
        moving_average(series, "v", 2)
        assert series.variables == ["v"]

    @pytest.mark.parametrize("window", [0, -1, 2.5, True])
    def test_invalid_window_raises(self, window):
        with pytest.raises(ValueError, match="positive integer"):
            moving_average(self._series([1, 2, 3]), "v", window)
