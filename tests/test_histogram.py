"""
Tests for shared-range histogram binning and regime splitting.
"""

import pytest
from macrodash.entities import MergedSeries
from macrodash.errors import InsufficientDataError
from macrodash.analytics.histogram import histogram, split_by_regime


class TestHistogram:
    """Tests for histogram function."""

    def test_shared_range(self):
        bins = histogram([1, 2, 3, 4, 5], [10, 20, 30, 40, 50], 5)

        assert len(bins) == 5
        assert bins[0].lower == 1
        assert bins[-1].upper == 50
        for b in bins:
            assert b.upper - b.lower == pytest.approx(9.8)
        assert [b.count_a for b in bins] == [5, 0, 0, 0, 0]
        assert [b.count_b for b in bins] == [1, 1, 1, 1, 1]

    def test_labels(self):
        bins = histogram([1, 2, 3, 4, 5], [10, 20, 30, 40, 50], 5)
        assert bins[0].range_label == "1.00-10.80"
        assert bins[-1].range_label == "40.20-50.00"

    def test_max_goes_to_last_bin(self):
        bins = histogram([0, 10], [], 4)
        assert bins[0].count_a == 1
        assert bins[-1].count_a == 1

    def test_counts_preserved(self):
        a = [0.5, -2.1, 3.3, 1.1, 0.0, 7.7]
        b = [-1.0, 2.2]
        bins = histogram(a, b, 3)
        assert sum(x.count_a for x in bins) == len(a)
        assert sum(x.count_b for x in bins) == len(b)

    def test_ascending_bins(self):
        bins = histogram([3, 1, 2], [9], 4)
        lowers = [b.lower for b in bins]
        assert lowers == sorted(lowers)

    def test_all_equal_values(self):
        bins = histogram([2, 2], [2], 3)
        assert len(bins) == 3
        assert bins[0].count_a == 2
        assert bins[0].count_b == 1
        assert sum(b.count_a + b.count_b for b in bins[1:]) == 0

    def test_one_empty_group(self):
        bins = histogram([], [1, 2, 3], 2)
        assert sum(b.count_a for b in bins) == 0
        assert sum(b.count_b for b in bins) == 3

    def test_value_on_edge_goes_to_labelled_bin(self):
        bins = histogram([0.0, 0.3, 1.0], [], 10)
        by_label = {b.range_label: b.count_a for b in bins}
        assert by_label["0.30-0.40"] == 1
        assert by_label["0.20-0.30"] == 0
        for b in bins:
            if b.count_a:
                assert b.range_label == f"{b.lower:.2f}-{b.upper:.2f}"

    def test_edges_are_contiguous(self):
        bins = histogram([0.0, 0.7, 2.3], [1.1], 7)
        for prev, curr in zip(bins, bins[1:]):
            assert prev.upper == curr.lower

    def test_non_finite_values_are_skipped(self):
        bins = histogram([1.0, float("nan"), float("inf")], [2.0, -float("inf")], 2)
        assert bins[0].lower == 1.0
        assert bins[-1].upper == 2.0
        assert [b.count_a for b in bins] == [1, 0]
        assert [b.count_b for b in bins] == [0, 1]

    def test_only_non_finite_values_raises(self):
        with pytest.raises(InsufficientDataError):
            histogram([float("nan")], [float("inf")], 3)

    def test_both_empty_raises(self):
        with pytest.raises(InsufficientDataError):
            histogram([], [], 5)

    @pytest.mark.parametrize("bin_count", [0, -1, 1.5])
    def test_invalid_bin_count_raises(self, bin_count):
        with pytest.raises(ValueError, match="bin_count"):
            histogram([1], [2], bin_count)


class TestSplitByRegime:
    """Tests for split_by_regime function."""

    def test_split(self):
        # cpi mean 5, population std ~2.83; threshold 0.5 -> bands at ~3.59 and ~6.41
        merged = MergedSeries([
            {"date": "2024-01-01", "cpi": 5.0, "nifty": 100.0},
            {"date": "2024-02-01", "cpi": 9.0, "nifty": 110.0},
            {"date": "2024-03-01", "cpi": 5.0, "nifty": 99.0},
            {"date": "2024-04-01", "cpi": 1.0, "nifty": 99.0},
        ])
        high, low = split_by_regime(merged, "cpi", "nifty", 0.5)
        assert high == pytest.approx([10.0])
        assert low == pytest.approx([0.0])

    def test_skips_non_finite_changes(self):
        merged = MergedSeries([
            {"date": "2024-01-01", "cpi": 1.0, "nifty": 0.0},
            {"date": "2024-02-01", "cpi": 9.0, "nifty": 10.0},
        ])
        high, low = split_by_regime(merged, "cpi", "nifty", 0.5)
        assert high == [] and low == []

    def test_missing_regime_variable_raises(self):
        merged = MergedSeries([{"date": "2024-01-01", "nifty": 1.0}])
        with pytest.raises(InsufficientDataError):
            split_by_regime(merged, "cpi", "nifty")
