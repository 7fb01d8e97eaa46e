"""
Markdown report generation.

This module generates markdown reports with descriptive statistics,
correlations, insights, the inflation-regime distribution and an optional
period comparison, with charts saved alongside.
"""

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Sequence
from macrodash.entities import MergedSeries, Statistics
from macrodash.analytics.summary import AnalysisSummary, PeriodComparison
from macrodash.analytics.histogram import histogram, split_by_regime
from macrodash.analytics.transforms import change_heatmap
from macrodash.reporting.charts import (
    plot_moving_averages, plot_rolling_correlation, plot_correlation_heatmap,
    plot_change_heatmap, plot_histogram, create_report_assets_dir
)


logger = logging.getLogger(__name__)

PAIR_FIELDS = ("cpi_nifty", "usdinr_nifty", "cpi_usdinr")


def fmt(value: Optional[float], digits: int = 2) -> str:
    """Format a number for display; None, NaN and infinities become "N/A"."""
    if value is None or not math.isfinite(value):
        return "N/A"
    return f"{value:,.{digits}f}"


class Report:
    """
    Generates markdown reports from an AnalysisSummary.

    Charts are written to an assets/ directory next to the report.
    """

    def __init__(self, output_dir: str = "reports"):
        """
        Initialize report generator.

        Args:
            output_dir: Directory to save reports
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate_report(
        self,
        summary: AnalysisSummary,
        merged: MergedSeries,
        labels: Dict[str, str],
        ma_windows: Sequence[int] = (3, 6, 12),
        bin_count: int = 10,
        regime_threshold: float = 0.5,
        comparison: Optional[PeriodComparison] = None,
        include_charts: bool = True
    ) -> str:
        """
        Generate complete markdown report.

        Args:
            summary: Output of build_summary
            merged: Merged series the summary was built from
            labels: Display name per variable
            ma_windows: Moving average windows for the line charts
            bin_count: Histogram bins for the regime distribution
            regime_threshold: Std multiple separating high/low inflation
            comparison: Optional period comparison to append
            include_charts: Whether to render matplotlib charts

        Returns:
            Path to generated report file
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        report_path = self.output_dir / f"market_report_{timestamp}.md"

        assets_dir = create_report_assets_dir(self.output_dir) if include_charts else None

        content = self._generate_header(merged)
        content += self._generate_statistics_section(summary.statistics, labels)
        content += self._generate_correlation_section(summary, labels, assets_dir)
        content += self._generate_insights_section(summary)
        content += self._generate_trend_section(merged, labels, ma_windows, assets_dir)
        content += self._generate_distribution_section(merged, bin_count, regime_threshold, assets_dir)
        if comparison is not None:
            content += self._generate_comparison_section(comparison, labels)
        content += self._generate_footer(summary.window)

        with open(report_path, "w") as f:
            f.write(content)

        return str(report_path)

    def _chart(self, assets_dir: Optional[Path], filename: str, alt: str, render) -> str:
        """Render one chart; a failed chart is logged and left out."""
        if assets_dir is None:
            return ""
        try:
            render(str(assets_dir / filename))
        except Exception as e:
            logger.warning("Chart %s failed: %s", filename, e)
            return ""
        return f"![{alt}](assets/{filename})\n\n"

    def _generate_header(self, merged: MergedSeries) -> str:
        """Generate report header."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        span = f"{merged.dates[0]} to {merged.dates[-1]}" if len(merged) else "no data"

        return f"""# Market Dynamics Report: Inflation, Currency & Equities

**Period:** {span}
**Records:** {len(merged)}
**Generated:** {timestamp}

---

"""

    def _generate_statistics_section(self, statistics: Dict[str, Statistics], labels: Dict[str, str]) -> str:
        section = "## Descriptive Statistics\n\n"
        section += "| Variable | Mean | Median | Std Dev | Min | Max | CV (%) |\n"
        section += "|----------|------|--------|---------|-----|-----|--------|\n"
        for name, stats in statistics.items():
            section += (
                f"| {labels.get(name, name)} | {fmt(stats.mean)} | {fmt(stats.median)} "
                f"| {fmt(stats.std)} | {fmt(stats.min)} | {fmt(stats.max)} "
                f"| {fmt(stats.coefficient_of_variation)} |\n"
            )
        section += "\n> *Standard deviation uses the population formula (divisor N). "
        section += "CV is the coefficient of variation, std / mean x 100.*\n\n---\n\n"
        return section

    def _generate_correlation_section(
        self,
        summary: AnalysisSummary,
        labels: Dict[str, str],
        assets_dir: Optional[Path]
    ) -> str:
        """Generate correlation section."""
        c = summary.correlations
        cpi, usdinr, nifty = (labels.get(k, k) for k in ("cpi", "usdinr", "nifty"))

        section = "## Correlations\n\n"
        section += "> **What is Pearson correlation?** A coefficient between -1 and 1 measuring how "
        section += "linearly two series move together. N/A means one series was constant.\n\n"
        section += "| Pair | Correlation |\n"
        section += "|------|-------------|\n"
        section += f"| {cpi} / {usdinr} | {fmt(c.cpi_usdinr, 3)} |\n"
        section += f"| {cpi} / {nifty} | {fmt(c.cpi_nifty, 3)} |\n"
        section += f"| {usdinr} / {nifty} | {fmt(c.usdinr_nifty, 3)} |\n\n"

        section += self._chart(
            assets_dir, "correlation_heatmap.png", "Correlation Heatmap",
            lambda path: plot_correlation_heatmap(c, [cpi, usdinr, nifty], path)
        )

        rows = summary.rolling_correlations
        section += f"### Rolling Correlation ({summary.window}-period window)\n\n"
        if not rows:
            section += f"*Fewer than {summary.window} aligned records; no rolling correlation available.*\n\n"
        else:
            latest = rows[-1]
            section += f"Latest window ending **{latest['date']}**:\n\n"
            for pair in PAIR_FIELDS:
                section += f"- {pair.replace('_', ' / ')}: {fmt(latest[pair], 3)}\n"
            section += "\n"
            section += self._chart(
                assets_dir, "rolling_correlation.png", "Rolling Correlation",
                lambda path: plot_rolling_correlation(rows, PAIR_FIELDS, summary.window, path)
            )

        section += "---\n\n"
        return section

    def _generate_insights_section(self, summary: AnalysisSummary) -> str:
        section = "## Insights\n\n"
        if not summary.insights:
            return section + "*No insights available.*\n\n---\n\n"
        for insight in summary.insights:
            section += f"- **{insight.title}** ({insight.type}): {insight.description}\n"
        section += "\n---\n\n"
        return section

    def _generate_trend_section(
        self,
        merged: MergedSeries,
        labels: Dict[str, str],
        ma_windows: Sequence[int],
        assets_dir: Optional[Path]
    ) -> str:
        """Generate moving average and monthly change charts."""
        if assets_dir is None:
            return ""
        section = "## Trends\n\n"
        for name in merged.variables:
            label = labels.get(name, name)
            section += self._chart(
                assets_dir, f"{name}_moving_averages.png", f"{label} Moving Averages",
                lambda path, name=name, label=label: plot_moving_averages(merged, name, ma_windows, label, path)
            )
            section += self._chart(
                assets_dir, f"{name}_monthly_change.png", f"{label} Monthly Change",
                lambda path, name=name, label=label: plot_change_heatmap(
                    change_heatmap(merged.split()[name]), f"{label}: Monthly % Change", path
                )
            )
        section += "---\n\n"
        return section

    def _generate_distribution_section(
        self,
        merged: MergedSeries,
        bin_count: int,
        regime_threshold: float,
        assets_dir: Optional[Path]
    ) -> str:
        """Generate the NIFTY return distribution under high vs low inflation."""
        section = "## Returns Under High vs Low Inflation\n\n"
        high, low = split_by_regime(merged, "cpi", "nifty", regime_threshold)
        if not high and not low:
            return section + "*Insufficient data for histogram.*\n\n---\n\n"

        bins = histogram(high, low, bin_count)
        section += f"High inflation: CPI > mean + {regime_threshold} x std ({len(high)} periods). "
        section += f"Low inflation: CPI < mean - {regime_threshold} x std ({len(low)} periods).\n\n"
        section += "| Return range (%) | High Inflation | Low Inflation |\n"
        section += "|------------------|----------------|---------------|\n"
        for b in bins:
            section += f"| {b.range_label} | {b.count_a} | {b.count_b} |\n"
        section += "\n"
        section += self._chart(
            assets_dir, "regime_histogram.png", "Regime Histogram",
            lambda path: plot_histogram(bins, ("High Inflation", "Low Inflation"), path)
        )
        section += "---\n\n"
        return section

    def _generate_comparison_section(self, comparison: PeriodComparison, labels: Dict[str, str]) -> str:
        section = "## Period Comparison\n\n"
        p1, p2 = comparison.period1, comparison.period2
        section += f"| Metric | {p1.start} to {p1.end} | {p2.start} to {p2.end} |\n"
        section += "|--------|------|------|\n"
        for name in p1.statistics:
            label = labels.get(name, name)
            section += f"| {label} mean | {fmt(p1.statistics[name].mean)} | {fmt(p2.statistics[name].mean)} |\n"
            section += f"| {label} std | {fmt(p1.statistics[name].std)} | {fmt(p2.statistics[name].std)} |\n"
        for pair in ("cpi_usdinr", "cpi_nifty", "usdinr_nifty"):
            section += (
                f"| r({pair.replace('_', ', ')}) | {fmt(getattr(p1.correlations, pair), 3)} "
                f"| {fmt(getattr(p2.correlations, pair), 3)} |\n"
            )
        section += "\n---\n\n"
        return section

    def _generate_footer(self, window: int) -> str:
        """Generate report footer."""
        return f"""
## Methodology Notes

### Alignment
- Series are merged on exact date strings; a variable missing on a date is left out, never filled
- Whole-history correlations use the dates on which both variables of a pair are present

### Statistics
- Population standard deviation (divisor N)
- Moving averages are drawn only where the full window is available

### Correlation
- Pearson product-moment coefficient
- Rolling window: {window} periods, recomputed directly for every window
- Constant series give an undefined (N/A) coefficient

### Distribution
- Both groups share one set of equal-width bins over their combined range

---

*Report generated by macrodash*
"""
