"""
Descriptive statistics over a single series.

Pure functions using plain floating point arithmetic. Standard deviation
uses the population formula (divide by N) everywhere in this package.
"""

import math
from typing import Sequence
from macrodash.entities import Statistics
from macrodash.errors import InsufficientDataError


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Raises InsufficientDataError on empty input."""
    if len(values) == 0:
        raise InsufficientDataError("mean requires at least 1 value")
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    """Middle value; the average of the two middle values for even counts."""
    if len(values) == 0:
        raise InsufficientDataError("median requires at least 1 value")
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def population_std(values: Sequence[float]) -> float:
    """sqrt(mean of squared deviations from the mean)."""
    mu = mean(values)
    variance = sum((v - mu) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def compute_statistics(values: Sequence[float]) -> Statistics:
    """
    Compute mean, median, std, min and max of one series.

    Preconditions:
        - values holds the defined values of one variable (no absent entries)

    Postconditions:
        - std is the population standard deviation
        - identical inputs give bit-identical results

    Args:
        values: Numeric values

    Returns:
        Statistics

    Raises:
        InsufficientDataError: If values is empty
    """
    values = list(values)
    if not values:
        raise InsufficientDataError("statistics require at least 1 value")

    return Statistics(
        mean=mean(values),
        median=median(values),
        std=population_std(values),
        min=min(values),
        max=max(values),
    )


def coefficient_of_variation(stats: Statistics) -> float:
    """std / mean x 100; NaN when the mean is zero."""
    return stats.coefficient_of_variation
