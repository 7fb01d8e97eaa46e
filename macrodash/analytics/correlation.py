"""
Pearson correlation engine.

This module computes whole-series and trailing-window Pearson
correlations between paired observations. Variance and covariance use
population formulas, consistent with the statistics module.
"""

import math
from typing import Dict, List, Sequence, Tuple
from macrodash.entities import MergedSeries
from macrodash.errors import InsufficientDataError, LengthMismatchError
from macrodash.analytics.merge import align_complete


def correlate(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson product-moment correlation of two paired sequences.

    Preconditions:
        - x and y have equal length and are aligned by index
        - absent observations were filtered out by the caller

    Postconditions:
        - Result is in [-1, 1], or NaN when either input has zero variance
        - correlate(x, y) == correlate(y, x)

    Args:
        x: First sequence
        y: Second sequence

    Returns:
        Correlation coefficient (NaN for a constant input)

    Raises:
        LengthMismatchError: If len(x) != len(y)
        InsufficientDataError: If fewer than 2 pairs are given
    """
    if len(x) != len(y):
        raise LengthMismatchError(f"length mismatch: x has {len(x)} values, y has {len(y)}")
    n = len(x)
    if n < 2:
        raise InsufficientDataError(f"correlation requires at least 2 pairs, got {n}")

    # A rounded mean leaves tiny nonzero deviations in a constant series.
    if min(x) == max(x) or min(y) == max(y):
        return math.nan

    mean_x = sum(x) / n
    mean_y = sum(y) / n

    cov = 0.0
    var_x = 0.0
    var_y = 0.0
    for xi, yi in zip(x, y):
        dx = xi - mean_x
        dy = yi - mean_y
        cov += dx * dy
        var_x += dx * dx
        var_y += dy * dy
    cov /= n
    var_x /= n
    var_y /= n

    if var_x == 0 or var_y == 0:
        return math.nan

    r = cov / math.sqrt(var_x * var_y)
    if math.isnan(r):
        return r
    # Rounding can push |r| a hair past 1.
    return max(-1.0, min(1.0, r))


def rolling_correlate(x: Sequence[float], y: Sequence[float], window: int) -> List[float]:
    """
    Correlation of each trailing window of two paired sequences.

    Each window is recomputed from scratch with correlate().

    Postconditions:
        - Output has the same length as the inputs
        - Output[i] is NaN for i < window - 1
        - Output[i] = correlate(x[i-window+1:i+1], y[i-window+1:i+1]) otherwise

    Args:
        x: First sequence
        y: Second sequence
        window: Trailing window size (at least 2)

    Returns:
        List of coefficients, NaN where undefined

    Raises:
        LengthMismatchError: If len(x) != len(y)
        ValueError: If window < 2
    """
    if len(x) != len(y):
        raise LengthMismatchError(f"length mismatch: x has {len(x)} values, y has {len(y)}")
    if not isinstance(window, int) or isinstance(window, bool) or window < 2:
        raise ValueError(f"window must be an integer >= 2, got {window!r}")

    result = []
    for i in range(len(x)):
        if i < window - 1:
            result.append(math.nan)
        else:
            start = i - window + 1
            result.append(correlate(x[start:i + 1], y[start:i + 1]))
    return result


def rolling_correlation_table(
    merged: MergedSeries,
    pairs: Sequence[Tuple[str, str]],
    window: int
) -> List[Dict[str, float]]:
    """
    Rolling correlations of several variable pairs, one row per date.

    Records are first restricted to dates on which every variable of every
    pair is present, so all pairs share one index. Rows start at the first
    full window.

    Args:
        merged: MergedSeries
        pairs: (x, y) variable pairs; each row field is named "x_y"
        window: Trailing window size

    Returns:
        List of {"date": ..., "x_y": r, ...} rows
    """
    variables = []
    for x_key, y_key in pairs:
        for name in (x_key, y_key):
            if name not in variables:
                variables.append(name)

    aligned = align_complete(merged, variables)
    dates = aligned.dates

    columns = {}
    for x_key, y_key in pairs:
        columns[f"{x_key}_{y_key}"] = rolling_correlate(
            aligned.values(x_key), aligned.values(y_key), window
        )

    rows = []
    for i in range(window - 1, len(dates)):
        row = {"date": dates[i]}
        for name, values in columns.items():
            row[name] = values[i]
        rows.append(row)
    return rows
