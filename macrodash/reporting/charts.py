"""
Chart generation for reports.

This module creates matplotlib charts for moving averages, rolling
correlations, the correlation heatmap, the monthly change heatmap and
the regime histogram.
"""

import math
from typing import Dict, List, Sequence, Tuple
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from pathlib import Path
from macrodash.entities import CorrelationMatrix, HistogramBin, MergedSeries
from macrodash.analytics.matrix import build_matrix
from macrodash.analytics.transforms import moving_average


MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def plot_moving_averages(
    merged: MergedSeries,
    key: str,
    windows: Sequence[int],
    label: str,
    save_path: str
) -> None:
    """
    Plot one variable with its trailing moving averages.

    Records without a value (or without a full window) leave gaps.

    Args:
        merged: MergedSeries holding the variable
        key: Variable name
        windows: Moving average windows (e.g. 3, 6, 12)
        label: Display name of the variable
        save_path: Path to save chart
    """
    series = merged
    for window in windows:
        series = moving_average(series, key, window)

    dates = pd.to_datetime(series.dates)
    fig, ax = plt.subplots(figsize=(12, 6))

    raw = [np.nan if v is None else v for v in series.column(key)]
    ax.plot(dates, raw, label=label, linewidth=2)
    for window in windows:
        values = [np.nan if v is None else v for v in series.column(f"{key}_ma{window}")]
        ax.plot(dates, values, label=f"{window}-period MA", linewidth=1.5, linestyle="--")

    ax.set_xlabel("Date")
    ax.set_ylabel(label)
    ax.set_title(f"{label} with Moving Averages")
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def plot_rolling_correlation(
    rows: List[dict],
    pairs: Sequence[str],
    window: int,
    save_path: str
) -> None:
    """
    Plot rolling correlations of several pairs.

    Args:
        rows: Output of rolling_correlation_table
        pairs: Row fields to plot (e.g. "cpi_nifty")
        window: Window used, for the title
        save_path: Path to save chart
    """
    fig, ax = plt.subplots(figsize=(12, 6))

    if rows:
        dates = pd.to_datetime([row["date"] for row in rows])
        for pair in pairs:
            ax.plot(dates, [row[pair] for row in rows], label=pair.replace("_", " / "), linewidth=2)

    ax.axhline(y=0, color="black", linestyle="--", alpha=0.3)
    ax.set_ylim(-1.05, 1.05)
    ax.set_xlabel("Date")
    ax.set_ylabel("Correlation")
    ax.set_title(f"Rolling Correlation ({window}-period window)")
    if rows:
        ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def plot_correlation_heatmap(
    correlations: CorrelationMatrix,
    labels: Sequence[str],
    save_path: str
) -> None:
    """
    Plot the 3x3 correlation matrix; undefined cells are marked "N/A".

    Args:
        correlations: CorrelationMatrix
        labels: Axis labels in (cpi, usdinr, nifty) order
        save_path: Path to save chart
    """
    matrix = np.array(build_matrix(correlations), dtype=float)

    fig, ax = plt.subplots(figsize=(7, 6))
    image = ax.imshow(np.ma.masked_invalid(matrix), cmap="RdYlGn", vmin=-1, vmax=1)
    fig.colorbar(image, ax=ax, label="Pearson r")

    ax.set_xticks(range(len(labels)))
    ax.set_yticks(range(len(labels)))
    ax.set_xticklabels(labels)
    ax.set_yticklabels(labels)

    for i in range(matrix.shape[0]):
        for j in range(matrix.shape[1]):
            value = matrix[i, j]
            text = "N/A" if math.isnan(value) else f"{value:.2f}"
            ax.text(j, i, text, ha="center", va="center", color="black")

    ax.set_title("Correlation Matrix")
    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def plot_change_heatmap(
    grid: Dict[str, Dict[str, float]],
    title: str,
    save_path: str
) -> None:
    """
    Plot monthly percentage changes as a year x month heatmap.

    Non-finite changes and missing months are left blank.

    Args:
        grid: Output of change_heatmap
        title: Chart title
        save_path: Path to save chart
    """
    years = sorted(grid)
    cells = np.full((len(years), 12), np.nan)
    for row, year in enumerate(years):
        for month, change in grid[year].items():
            if math.isfinite(change):
                cells[row, int(month) - 1] = change

    finite = cells[np.isfinite(cells)]
    limit = float(np.abs(finite).max()) if finite.size else 1.0

    fig, ax = plt.subplots(figsize=(12, max(3, 0.5 * len(years) + 1)))
    image = ax.imshow(np.ma.masked_invalid(cells), cmap="RdYlGn", vmin=-limit, vmax=limit, aspect="auto")
    fig.colorbar(image, ax=ax, label="% change")

    ax.set_xticks(range(12))
    ax.set_xticklabels(MONTH_NAMES)
    ax.set_yticks(range(len(years)))
    ax.set_yticklabels(years)
    ax.set_title(title)

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def plot_histogram(
    bins: List[HistogramBin],
    labels: Tuple[str, str],
    save_path: str
) -> None:
    """
    Plot side-by-side bar counts of two groups over shared bins.

    Args:
        bins: Output of histogram
        labels: Display names of (group A, group B)
        save_path: Path to save chart
    """
    fig, ax = plt.subplots(figsize=(12, 6))

    x_pos = np.arange(len(bins))
    width = 0.4
    ax.bar(x_pos - width / 2, [b.count_a for b in bins], width, label=labels[0], alpha=0.8)
    ax.bar(x_pos + width / 2, [b.count_b for b in bins], width, label=labels[1], alpha=0.8)

    ax.set_xticks(x_pos)
    ax.set_xticklabels([b.range_label for b in bins], rotation=45, ha="right")
    ax.set_xlabel("Range")
    ax.set_ylabel("Frequency")
    ax.set_title(f"Distribution: {labels[0]} vs {labels[1]}")
    ax.legend()
    ax.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def create_report_assets_dir(report_dir: Path) -> Path:
    """
    Create assets directory for report charts.

    Args:
        report_dir: Report directory path

    Returns:
        Path to assets directory
    """
    assets_dir = report_dir / "assets"
    assets_dir.mkdir(parents=True, exist_ok=True)
    return assets_dir
