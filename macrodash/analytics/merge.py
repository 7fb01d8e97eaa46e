"""
Functions for merging and aligning independently-sampled series.

This module provides pure functions that turn per-indicator DataPoint
lists into a single MergedSeries keyed by date, following functional
programming principles where possible.
"""

from collections import abc
from typing import Dict, Iterable, List, Mapping, Sequence, Union
from macrodash.entities import DataPoint, MergedSeries


SeriesInput = Union[Mapping[str, Sequence], MergedSeries]


def coerce_point(point) -> DataPoint:
    """
    Convert a DataPoint, a {"date", "value"} mapping, or a (date, value) pair.

    Raises:
        ValueError: If the point cannot be interpreted
    """
    if isinstance(point, DataPoint):
        return point
    if isinstance(point, abc.Mapping):
        if "date" not in point or "value" not in point:
            raise ValueError(f"point needs 'date' and 'value' keys: {point!r}")
        return DataPoint(str(point["date"]), point["value"])
    if isinstance(point, (tuple, list)) and len(point) == 2:
        return DataPoint(str(point[0]), point[1])
    raise ValueError(f"cannot interpret {point!r} as a data point")


def merge_series(series: SeriesInput) -> MergedSeries:
    """
    Merge several named series into one record stream keyed by date.

    Preconditions:
        - series maps variable names to sequences of points
          (or is an already merged MergedSeries)

    Postconditions:
        - One record per distinct date across all inputs, ascending
        - A record holds a variable only if that variable's series has a
          point on exactly that date string; nothing is filled in
        - Inputs are not modified

    Args:
        series: Mapping of variable name to DataPoint sequence, or a MergedSeries

    Returns:
        MergedSeries (empty if no input series or all are empty)
    """
    if isinstance(series, MergedSeries):
        series = series.split()

    by_date: Dict[str, dict] = {}
    for name, points in series.items():
        for raw in points:
            point = coerce_point(raw)
            record = by_date.setdefault(point.date, {"date": point.date})
            record[name] = point.value

    return MergedSeries([by_date[d] for d in sorted(by_date)])


def align_complete(merged: MergedSeries, variables: Iterable[str]) -> MergedSeries:
    """
    Keep only the records on which every named variable is present.

    Args:
        merged: Output of merge_series
        variables: Variable names that must all be present

    Returns:
        MergedSeries restricted to common dates
    """
    required = list(variables)
    return MergedSeries([
        record for record in merged
        if all(name in record for name in required)
    ])


def filter_by_date_range(points: Sequence, start: str, end: str) -> List[DataPoint]:
    """
    Return the points dated within [start, end] inclusive.

    Dates are ISO strings, so lexical comparison is chronological.

    Raises:
        ValueError: If start is after end
    """
    if start > end:
        raise ValueError(f"start ({start}) must not be after end ({end})")
    selected = []
    for raw in points:
        point = coerce_point(raw)
        if start <= point.date <= end:
            selected.append(point)
    return selected
