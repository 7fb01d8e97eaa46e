"""
Equal-width histogram binning for two comparison groups.

Both groups share one set of bin edges derived from their combined
range, so bucket i means the same interval for each group.
"""

import math
from bisect import bisect_right
from typing import List, Sequence, Tuple
from macrodash.entities import HistogramBin, MergedSeries
from macrodash.errors import InsufficientDataError
from macrodash.analytics.statistics import mean, population_std
from macrodash.analytics.transforms import pct_change


def _bin_index(value: float, edges: List[float]) -> int:
    # edges holds the bin_count lower bounds followed by the upper bound
    if edges[0] == edges[-1]:
        return 0
    return min(max(bisect_right(edges, value) - 1, 0), len(edges) - 2)


def histogram(
    group_a: Sequence[float],
    group_b: Sequence[float],
    bin_count: int = 10
) -> List[HistogramBin]:
    """
    Count both groups into bin_count equal-width buckets over a shared range.

    Preconditions:
        - at least one group holds a finite value
        - bin_count >= 1

    Postconditions:
        - Exactly bin_count bins, ascending
        - NaN and infinite values are left out of the range and the counts
        - Range is [min, max] of both groups combined
        - A value on an edge falls into the bin that starts there
        - A value equal to max falls into the last bin
        - If max == min, every value falls into the first bin

    Args:
        group_a: First group of values
        group_b: Second group of values
        bin_count: Number of buckets

    Returns:
        List of HistogramBin

    Raises:
        InsufficientDataError: If neither group holds a finite value
        ValueError: If bin_count < 1
    """
    if not isinstance(bin_count, int) or isinstance(bin_count, bool) or bin_count < 1:
        raise ValueError(f"bin_count must be a positive integer, got {bin_count!r}")

    values_a = [v for v in group_a if math.isfinite(v)]
    values_b = [v for v in group_b if math.isfinite(v)]
    combined = values_a + values_b
    if not combined:
        raise InsufficientDataError("histogram requires at least 1 finite value")

    lower = min(combined)
    upper = max(combined)
    edges = [lower + (upper - lower) * i / bin_count for i in range(bin_count)] + [upper]

    counts_a = [0] * bin_count
    counts_b = [0] * bin_count
    for value in values_a:
        counts_a[_bin_index(value, edges)] += 1
    for value in values_b:
        counts_b[_bin_index(value, edges)] += 1

    bins = []
    for i in range(bin_count):
        lo, hi = edges[i], edges[i + 1]
        bins.append(HistogramBin(
            range_label=f"{lo:.2f}-{hi:.2f}",
            count_a=counts_a[i],
            count_b=counts_b[i],
            lower=lo,
            upper=hi,
        ))
    return bins


def split_by_regime(
    merged: MergedSeries,
    regime_key: str,
    value_key: str,
    threshold: float = 0.5
) -> Tuple[List[float], List[float]]:
    """
    Split period-over-period changes of one variable by the regime of another.

    Used for the "returns under high vs low inflation" comparison: a change
    of value_key at record i (needs value_key at i-1 and i, and regime_key
    at i) goes to the high group when regime_key at i is above
    mean + threshold * std, and to the low group when below
    mean - threshold * std. Changes in between, and non-finite changes
    (previous value of zero), are dropped.

    Args:
        merged: MergedSeries holding both variables
        regime_key: Variable that defines the regime (e.g. "cpi")
        value_key: Variable whose percentage changes are grouped (e.g. "nifty")
        threshold: Multiple of the regime std around its mean

    Returns:
        (high_group, low_group) lists of percentage changes

    Raises:
        InsufficientDataError: If regime_key has no values
    """
    regime_values = merged.values(regime_key)
    if not regime_values:
        raise InsufficientDataError(f"no values for regime variable '{regime_key}'")

    center = mean(regime_values)
    spread = threshold * population_std(regime_values)

    high, low = [], []
    records = merged.to_records()
    for prev, curr in zip(records, records[1:]):
        if value_key not in prev or value_key not in curr or regime_key not in curr:
            continue
        change = pct_change(prev[value_key], curr[value_key])
        if not math.isfinite(change):
            continue
        regime = curr[regime_key]
        if regime > center + spread:
            high.append(change)
        elif regime < center - spread:
            low.append(change)
    return high, low
