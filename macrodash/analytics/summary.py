"""
Full analysis bundles and period comparison.

This module wires the merger, statistics, correlation and insight
functions together into the payloads served by the CLI, the report and
the web API.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple
from macrodash.entities import CorrelationMatrix, Insight, Statistics
from macrodash.analytics.merge import merge_series, filter_by_date_range
from macrodash.analytics.statistics import compute_statistics
from macrodash.analytics.correlation import rolling_correlation_table
from macrodash.analytics.matrix import compute_correlation_matrix, MATRIX_ORDER
from macrodash.analytics.insights import generate_insights


@dataclass
class AnalysisSummary:
    """
    Everything the dashboard summary panels need.

    Attributes:
        correlations: Whole-history correlation matrix
        statistics: Descriptive statistics per variable
        rolling_correlations: Rows of {"date", "cpi_nifty", "usdinr_nifty", "cpi_usdinr"}
        insights: Generated insights
        window: Rolling correlation window used
    """
    correlations: CorrelationMatrix
    statistics: Dict[str, Statistics]
    rolling_correlations: List[dict]
    insights: List[Insight]
    window: int

    def as_dict(self) -> dict:
        return {
            "correlations": self.correlations.as_dict(),
            "statistics": {k: v.as_dict() for k, v in self.statistics.items()},
            "rolling_correlations": [dict(row) for row in self.rolling_correlations],
            "insights": [i.as_dict() for i in self.insights],
            "window": self.window,
        }


@dataclass
class PeriodSummary:
    """Statistics and correlations of one date range."""
    start: str
    end: str
    statistics: Dict[str, Statistics]
    correlations: CorrelationMatrix

    def as_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "statistics": {k: v.as_dict() for k, v in self.statistics.items()},
            "correlations": self.correlations.as_dict(),
        }


@dataclass
class PeriodComparison:
    """Side-by-side summaries of two date ranges."""
    period1: PeriodSummary
    period2: PeriodSummary

    def as_dict(self) -> dict:
        return {"period1": self.period1.as_dict(), "period2": self.period2.as_dict()}


def _rolling_pairs(variables: Sequence[str]) -> List[Tuple[str, str]]:
    cpi, usdinr, nifty = variables
    return [(cpi, nifty), (usdinr, nifty), (cpi, usdinr)]


def build_summary(
    raw: Mapping[str, Sequence],
    window: int = 12,
    variables: Sequence[str] = MATRIX_ORDER
) -> AnalysisSummary:
    """
    Merge raw series and compute the full analysis bundle.

    Args:
        raw: Mapping of variable name to DataPoint sequence
        window: Rolling correlation window
        variables: The (cpi, usdinr, nifty) variable names

    Returns:
        AnalysisSummary

    Raises:
        InsufficientDataError: If a variable is empty or pairs lack overlap
    """
    merged = merge_series(raw)

    statistics = {name: compute_statistics(merged.values(name)) for name in variables}

    return AnalysisSummary(
        correlations=compute_correlation_matrix(merged, variables),
        statistics=statistics,
        rolling_correlations=rolling_correlation_table(merged, _rolling_pairs(variables), window),
        insights=generate_insights(merged, *variables),
        window=window,
    )


def summarize_period(
    raw: Mapping[str, Sequence],
    start: str,
    end: str,
    variables: Sequence[str] = MATRIX_ORDER
) -> PeriodSummary:
    """Statistics and correlations of the raw series restricted to [start, end]."""
    filtered = {name: filter_by_date_range(raw.get(name, []), start, end) for name in variables}
    merged = merge_series(filtered)
    return PeriodSummary(
        start=start,
        end=end,
        statistics={name: compute_statistics(merged.values(name)) for name in variables},
        correlations=compute_correlation_matrix(merged, variables),
    )


def compare_periods(
    raw: Mapping[str, Sequence],
    period1: Tuple[str, str],
    period2: Tuple[str, str],
    variables: Sequence[str] = MATRIX_ORDER
) -> PeriodComparison:
    """
    Compare statistics and correlations between two date ranges.

    Args:
        raw: Mapping of variable name to DataPoint sequence
        period1: (start, end) ISO dates, inclusive
        period2: (start, end) ISO dates, inclusive
        variables: The (cpi, usdinr, nifty) variable names

    Returns:
        PeriodComparison

    Raises:
        ValueError: If a period's start is after its end
        InsufficientDataError: If a period holds too little data
    """
    return PeriodComparison(
        period1=summarize_period(raw, period1[0], period1[1], variables),
        period2=summarize_period(raw, period2[0], period2[1], variables),
    )
