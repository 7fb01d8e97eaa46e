"""
Command-line interface for the dashboard analytics.

This module provides CLI commands for generating the full market report,
comparing two periods, and printing summary statistics.
"""

import argparse
import logging
import sys
import warnings
from typing import Dict, List, Optional

# yfinance emits FutureWarnings from pandas on monthly downloads
warnings.filterwarnings("ignore", category=FutureWarning, module="yfinance")

from macrodash.cache import DataCache
from macrodash.config import DashboardConfig, load_config
from macrodash.entities import DataPoint
from macrodash.errors import DashboardError
from macrodash.analytics.merge import merge_series
from macrodash.analytics.matrix import compute_correlation_matrix, build_matrix
from macrodash.analytics.statistics import compute_statistics
from macrodash.analytics.summary import build_summary, compare_periods
from macrodash.data_sources.market import fetch_all
from macrodash.reporting.report import Report, fmt


def _load_data(config: DashboardConfig, offline: bool) -> Dict[str, List[DataPoint]]:
    cache = DataCache(config.cache_dir, ttl=config.cache_ttl)
    print("  Loading indicator data..." + (" (offline, CSV only)" if offline else ""))
    raw = fetch_all(config, cache=cache, use_live=not offline)
    for name, points in raw.items():
        print(f"    ✓ {config.indicators[name].label}: {len(points)} points")
    return raw


def _labels(config: DashboardConfig) -> Dict[str, str]:
    return {name: indicator.label for name, indicator in config.indicators.items()}


def analyze_command(args):
    """Run full analysis and write a markdown report."""
    print("Analyzing CPI, USD-INR and NIFTY 50...")

    try:
        config = load_config(args.config)
        window = args.window or config.analysis.rolling_window
        raw = _load_data(config, args.offline)

        print("  Merging series...")
        merged = merge_series(raw)
        print(f"    {len(merged)} dates across {len(merged.variables)} variables")

        print(f"  Computing statistics and correlations (window={window})...")
        summary = build_summary(raw, window=window, variables=config.variables)
        c = summary.correlations
        print(f"    CPI / USD-INR = {fmt(c.cpi_usdinr, 3)}")
        print(f"    CPI / NIFTY   = {fmt(c.cpi_nifty, 3)}")
        print(f"    USD-INR / NIFTY = {fmt(c.usdinr_nifty, 3)}")
        print(f"    {len(summary.insights)} insights generated")

        print("  Generating report...")
        report = Report(output_dir=args.output)
        report_path = report.generate_report(
            summary,
            merged,
            labels=_labels(config),
            ma_windows=config.analysis.moving_average_windows,
            bin_count=config.analysis.bin_count,
            regime_threshold=config.analysis.regime_threshold,
            include_charts=not args.no_charts,
        )

        print(f"\n✓ Analysis complete!")
        print(f"  Report saved to: {report_path}")

    except (DashboardError, ValueError) as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


def compare_command(args):
    """Compare statistics and correlations of two periods."""
    (p1_start, p1_end), (p2_start, p2_end) = args.period1, args.period2
    print(f"Comparing {p1_start}..{p1_end} with {p2_start}..{p2_end}...")

    try:
        config = load_config(args.config)
        raw = _load_data(config, args.offline)
        comparison = compare_periods(
            raw, (p1_start, p1_end), (p2_start, p2_end), variables=config.variables
        )
    except (DashboardError, ValueError) as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    labels = _labels(config)
    p1, p2 = comparison.period1, comparison.period2
    print(f"\n{'Metric':<24}{'Period 1':>14}{'Period 2':>14}")
    for name in p1.statistics:
        label = labels.get(name, name)
        print(f"{label + ' mean':<24}{fmt(p1.statistics[name].mean):>14}{fmt(p2.statistics[name].mean):>14}")
        print(f"{label + ' std':<24}{fmt(p1.statistics[name].std):>14}{fmt(p2.statistics[name].std):>14}")
    for pair in ("cpi_usdinr", "cpi_nifty", "usdinr_nifty"):
        r1 = fmt(getattr(p1.correlations, pair), 3)
        r2 = fmt(getattr(p2.correlations, pair), 3)
        print(f"{'r ' + pair:<24}{r1:>14}{r2:>14}")


def stats_command(args):
    """Print descriptive statistics and the correlation matrix."""
    try:
        config = load_config(args.config)
        raw = _load_data(config, args.offline)
        merged = merge_series(raw)
        matrix = build_matrix(compute_correlation_matrix(merged, config.variables))
    except (DashboardError, ValueError) as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    labels = _labels(config)
    print(f"\n{'Variable':<14}{'Mean':>12}{'Median':>12}{'Std':>12}{'Min':>12}{'Max':>12}{'CV %':>8}")
    for name in config.variables:
        values = merged.values(name)
        if not values:
            print(f"{labels[name]:<14}  no data")
            continue
        s = compute_statistics(values)
        print(
            f"{labels[name]:<14}{fmt(s.mean):>12}{fmt(s.median):>12}{fmt(s.std):>12}"
            f"{fmt(s.min):>12}{fmt(s.max):>12}{fmt(s.coefficient_of_variation):>8}"
        )

    print("\nCorrelation matrix:")
    names = [labels[n] for n in config.variables]
    print(" " * 14 + "".join(f"{n:>12}" for n in names))
    for name, row in zip(names, matrix):
        print(f"{name:<14}" + "".join(f"{fmt(v, 3):>12}" for v in row))


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Market Dynamics Dashboard Analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--config", default=None, help="Indicator config YAML (default: data/indicators.yaml)")
    parser.add_argument("--offline", action="store_true", help="Use fallback CSV datasets only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log data source fallbacks")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    analyze_parser = subparsers.add_parser("analyze", help="Run full analysis and write a report")
    analyze_parser.add_argument("--window", type=int, default=None, help="Rolling correlation window")
    analyze_parser.add_argument("--output", default="reports", help="Report directory (default: reports)")
    analyze_parser.add_argument("--no-charts", action="store_true", help="Skip chart rendering")

    compare_parser = subparsers.add_parser("compare", help="Compare two periods")
    compare_parser.add_argument("--period1", nargs=2, metavar=("START", "END"), required=True,
                                help="First period (YYYY-MM-DD YYYY-MM-DD)")
    compare_parser.add_argument("--period2", nargs=2, metavar=("START", "END"), required=True,
                                help="Second period (YYYY-MM-DD YYYY-MM-DD)")

    subparsers.add_parser("stats", help="Print statistics and correlation matrix")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "analyze":
        analyze_command(args)
    elif args.command == "compare":
        compare_command(args)
    elif args.command == "stats":
        stats_command(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
