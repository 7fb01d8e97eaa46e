"""
Correlation matrix for the heatmap view.
"""

from typing import List, Sequence
from macrodash.entities import CorrelationMatrix, MergedSeries
from macrodash.analytics.correlation import correlate


MATRIX_ORDER = ("cpi", "usdinr", "nifty")


def compute_correlation_matrix(
    merged: MergedSeries,
    variables: Sequence[str] = MATRIX_ORDER
) -> CorrelationMatrix:
    """
    Whole-history Pearson coefficients for the three variable pairs.

    Each pair uses the records where both of its variables are present.

    Args:
        merged: MergedSeries
        variables: Names mapped, in order, onto (cpi, usdinr, nifty)

    Returns:
        CorrelationMatrix

    Raises:
        ValueError: If variables does not name exactly three variables
        InsufficientDataError: If a pair has fewer than 2 common records
    """
    if len(variables) != 3:
        raise ValueError(f"expected 3 variables, got {len(variables)}")
    cpi, usdinr, nifty = variables

    return CorrelationMatrix(
        cpi_usdinr=correlate(*merged.paired(cpi, usdinr)),
        cpi_nifty=correlate(*merged.paired(cpi, nifty)),
        usdinr_nifty=correlate(*merged.paired(usdinr, nifty)),
    )


def build_matrix(c: CorrelationMatrix) -> List[List[float]]:
    """
    Reshape pairwise coefficients into a symmetric 3x3 matrix.

    Row/column order is (cpi, usdinr, nifty) with 1.0 on the diagonal.
    """
    return [
        [1.0, c.cpi_usdinr, c.cpi_nifty],
        [c.cpi_usdinr, 1.0, c.usdinr_nifty],
        [c.cpi_nifty, c.usdinr_nifty, 1.0],
    ]
