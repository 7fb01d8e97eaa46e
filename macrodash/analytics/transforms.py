"""
Per-point derived series: percentage changes and moving averages.

These transforms feed the heatmap and the moving-average line charts.
"""

import math
from typing import Dict, List, Sequence
from macrodash.entities import DataPoint, MergedSeries
from macrodash.analytics.merge import coerce_point


def pct_change(prev: float, curr: float) -> float:
    """
    Percentage change from prev to curr.

    A zero prev follows IEEE semantics instead of raising: the result is
    +inf or -inf depending on the sign of curr, and NaN when curr is also 0.
    Callers display non-finite results as "no data".
    """
    if prev == 0:
        if curr == 0 or math.isnan(curr):
            return math.nan
        return math.copysign(math.inf, curr) * math.copysign(1.0, prev)
    return (curr - prev) / prev * 100


def pct_change_series(points: Sequence) -> List[DataPoint]:
    """
    Build the percentage-change series of a DataPoint sequence.

    Postconditions:
        - Length is N-1; the first point has no predecessor and no change
        - Output point i carries the date of input point i+1

    Args:
        points: Ordered DataPoints (or coercible mappings/pairs)

    Returns:
        List of DataPoints whose values are percentage changes
    """
    coerced = [coerce_point(p) for p in points]
    return [
        DataPoint(curr.date, pct_change(prev.value, curr.value))
        for prev, curr in zip(coerced, coerced[1:])
    ]


def change_heatmap(points: Sequence) -> Dict[str, Dict[str, float]]:
    """
    Group percentage changes by year and month for the heatmap view.

    Returns:
        {"2023": {"01": 1.2, "02": -0.4, ...}, ...}; months without a
        change value are missing
    """
    grid: Dict[str, Dict[str, float]] = {}
    for point in pct_change_series(points):
        year, month, _ = point.date.split("-")
        grid.setdefault(year, {})[month] = point.value
    return grid


def moving_average(series: MergedSeries, key: str, window: int) -> MergedSeries:
    """
    Add a trailing moving average of one variable to every record.

    The field f"{key}_ma{window}" on record i is the mean of `key` over
    records i-window+1 .. i, and is set only when all `window` values in
    that span are present. Otherwise the field is left absent; partial
    windows are never averaged.

    Preconditions:
        - window is a positive integer

    Postconditions:
        - Returns a new MergedSeries; the input is unchanged
        - The first window-1 records never carry the field
        - window > len(series) adds no fields at all

    Args:
        series: MergedSeries
        key: Variable to average
        window: Number of trailing records

    Returns:
        New MergedSeries with the added field

    Raises:
        ValueError: If window is not a positive integer
    """
    if not isinstance(window, int) or isinstance(window, bool) or window <= 0:
        raise ValueError(f"window must be a positive integer, got {window!r}")

    field = f"{key}_ma{window}"
    column = series.column(key)
    records = series.to_records()

    for i in range(window - 1, len(records)):
        span = column[i - window + 1:i + 1]
        if any(v is None for v in span):
            continue
        records[i][field] = sum(span) / window

    return MergedSeries(records)
