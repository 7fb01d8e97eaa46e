"""
Automated insights over the merged CPI, USD/INR and NIFTY 50 series.

Each insight is a short classified observation (positive / negative /
neutral) built from correlations, the coefficient of variation, and
recent trends. Undefined numbers are reported as "N/A".
"""

import math
from typing import List, Optional, Sequence
from macrodash.entities import Insight, MergedSeries
from macrodash.errors import InsufficientDataError
from macrodash.analytics.merge import align_complete
from macrodash.analytics.correlation import correlate
from macrodash.analytics.statistics import compute_statistics, mean
from macrodash.analytics.transforms import pct_change


STRONG_CORRELATION = 0.7
NOTABLE_CORRELATION = 0.5
HIGH_VOLATILITY_CV = 20.0
RECENT_POINTS = 12
STABLE_FX_STD = 5.0


def _strength(r: float) -> str:
    return "strong" if abs(r) > STRONG_CORRELATION else "moderate"


def _direction(r: float) -> str:
    return "positive" if r > 0 else "negative"


def _na_insight(insight_id: str, title: str, subject: str) -> Insight:
    return Insight(
        id=insight_id,
        type="neutral",
        title=title,
        description=f"{subject} is N/A: one of the series is constant over the period.",
        value=None,
    )


def _cpi_nifty_insight(r: float) -> Insight:
    if math.isnan(r):
        return _na_insight("1", "Correlation: CPI & NIFTY 50", "The CPI / NIFTY 50 correlation")
    if abs(r) > NOTABLE_CORRELATION:
        direction = _direction(r)
        effect = (
            "When inflation rises, the market tends to rise as well."
            if r > 0 else
            "When inflation rises, the market tends to decline."
        )
        return Insight(
            id="1",
            type=direction,
            title=f"{direction.capitalize()} Correlation: CPI & NIFTY 50",
            description=(
                f"The correlation coefficient between CPI and NIFTY 50 is {r:.3f}, "
                f"indicating a {_strength(r)} {direction} relationship. {effect}"
            ),
            value=r,
        )
    return Insight(
        id="1",
        type="neutral",
        title="Weak Correlation: CPI & NIFTY 50",
        description=(
            f"The correlation coefficient between CPI and NIFTY 50 is {r:.3f}, "
            "suggesting a weak linear relationship. Other factors may have "
            "stronger influence on market performance."
        ),
        value=r,
    )


def _usdinr_nifty_insight(r: float) -> Optional[Insight]:
    if math.isnan(r):
        return _na_insight("2", "Correlation: USD-INR & NIFTY 50", "The USD-INR / NIFTY 50 correlation")
    if abs(r) <= NOTABLE_CORRELATION:
        return None
    direction = _direction(r)
    effect = (
        "Rupee depreciation coincides with market gains."
        if r > 0 else
        "Rupee depreciation coincides with market declines."
    )
    return Insight(
        id="2",
        type=direction,
        title=f"{direction.capitalize()} Correlation: USD-INR & NIFTY 50",
        description=(
            f"The correlation coefficient between USD-INR and NIFTY 50 is {r:.3f}, "
            f"showing a {_strength(r)} {direction} relationship. {effect}"
        ),
        value=r,
    )


def _cpi_usdinr_insight(r: float) -> Optional[Insight]:
    if math.isnan(r):
        return _na_insight("3", "CPI & USD-INR Relationship", "The CPI / USD-INR correlation")
    if abs(r) <= NOTABLE_CORRELATION:
        return None
    effect = (
        "Higher inflation tends to be associated with rupee depreciation."
        if r > 0 else
        "The relationship suggests complex economic dynamics."
    )
    return Insight(
        id="3",
        type="neutral",
        title="CPI & USD-INR Relationship",
        description=f"Inflation and exchange rate show a correlation of {r:.3f}. {effect}",
        value=r,
    )


def _volatility_insight(nifty: Sequence[float]) -> Insight:
    stats = compute_statistics(nifty)
    cv = stats.coefficient_of_variation
    if math.isnan(cv):
        return _na_insight("4", "Market Volatility", "The NIFTY 50 coefficient of variation")
    high = cv > HIGH_VOLATILITY_CV
    return Insight(
        id="4",
        type="negative" if high else "positive",
        title=f"Market Volatility: {'High' if high else 'Moderate'}",
        description=(
            f"NIFTY 50 shows a coefficient of variation of {cv:.2f}%, indicating "
            f"{'significant' if high else 'moderate'} volatility over the period. "
            f"Mean value: {stats.mean:.2f}, Standard deviation: {stats.std:.2f}."
        ),
        value=cv,
    )


def _trend_insight(nifty: Sequence[float]) -> Insight:
    recent = list(nifty[-RECENT_POINTS:])
    trend = pct_change(recent[0], recent[-1])
    if not math.isfinite(trend):
        return _na_insight("5", "Recent Market Trend", "The recent NIFTY 50 trend")
    if trend > 10:
        momentum = "This represents strong positive momentum."
    elif trend < -10:
        momentum = "This represents significant bearish pressure."
    else:
        momentum = "Market shows relatively stable movement."
    return Insight(
        id="5",
        type="positive" if trend > 0 else "negative",
        title=f"Recent Market Trend: {'Upward' if trend > 0 else 'Downward'}",
        description=(
            f"Over the last {len(recent)} periods, NIFTY 50 has "
            f"{'gained' if trend > 0 else 'lost'} {abs(trend):.2f}%. {momentum}"
        ),
        value=trend,
    )


def _inflation_insight(cpi: Sequence[float]) -> Insight:
    overall = mean(cpi)
    recent = mean(cpi[-RECENT_POINTS:])
    elevated = recent > overall
    return Insight(
        id="6",
        type="negative" if elevated else "positive",
        title="Inflation Trend Analysis",
        description=(
            f"Recent average CPI ({recent:.2f}) is {'higher' if elevated else 'lower'} "
            f"than the overall period average ({overall:.2f}). "
            + ("Inflation has been elevated recently." if elevated
               else "Inflation has been relatively controlled.")
        ),
        value=recent,
    )


def _exchange_rate_insight(usdinr: Sequence[float]) -> Insight:
    stats = compute_statistics(usdinr)
    return Insight(
        id="7",
        type="neutral",
        title="Exchange Rate Dynamics",
        description=(
            f"USD-INR has averaged {stats.mean:.2f} over the period with a standard "
            f"deviation of {stats.std:.2f}. "
            + ("The rupee has shown relative stability." if stats.std < STABLE_FX_STD
               else "Notable exchange rate fluctuations observed.")
        ),
        value=stats.mean,
    )


def generate_insights(
    merged: MergedSeries,
    cpi_key: str = "cpi",
    usdinr_key: str = "usdinr",
    nifty_key: str = "nifty"
) -> List[Insight]:
    """
    Generate dashboard insights from merged data.

    Records are restricted to dates on which all three variables are
    present before anything is computed.

    Args:
        merged: MergedSeries holding the three variables
        cpi_key: Name of the inflation variable
        usdinr_key: Name of the exchange rate variable
        nifty_key: Name of the equity index variable

    Returns:
        Insights ordered by id; the USD-INR and CPI/USD-INR correlation
        insights appear only when |r| > 0.5 or r is undefined

    Raises:
        InsufficientDataError: If fewer than 2 records hold all three variables
    """
    aligned = align_complete(merged, [cpi_key, usdinr_key, nifty_key])
    if len(aligned) < 2:
        raise InsufficientDataError(
            f"insights require at least 2 aligned records, got {len(aligned)}"
        )

    cpi = aligned.values(cpi_key)
    usdinr = aligned.values(usdinr_key)
    nifty = aligned.values(nifty_key)

    candidates = [
        _cpi_nifty_insight(correlate(cpi, nifty)),
        _usdinr_nifty_insight(correlate(usdinr, nifty)),
        _cpi_usdinr_insight(correlate(cpi, usdinr)),
        _volatility_insight(nifty),
        _trend_insight(nifty),
        _inflation_insight(cpi),
        _exchange_rate_insight(usdinr),
    ]
    return [insight for insight in candidates if insight is not None]
