"""
Fallback datasets stored as CSV files.

This module loads local "date,value" CSV files into DataPoint lists. They
are used whenever a live source is unavailable.
"""

from pathlib import Path
from typing import List, Union
import pandas as pd
from macrodash.entities import DataPoint
from macrodash.errors import DataError


REQUIRED_COLUMNS = ["date", "value"]


def load_series_csv(csv_path: Union[str, Path]) -> List[DataPoint]:
    """
    Load one series from a CSV file.

    Expected CSV columns:
        - date: ISO date string (YYYY-MM-DD)
        - value: Decimal number

    Preconditions:
        - csv_path points to a valid CSV file with the columns above

    Postconditions:
        - Rows with an empty value are dropped
        - Points are sorted by date; for duplicate dates the first row wins

    Args:
        csv_path: Path to CSV file

    Returns:
        List of DataPoint objects

    Raises:
        DataError: If the file doesn't exist or is invalid
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise DataError(f"Series CSV not found: {csv_path}")

    try:
        df = pd.read_csv(csv_file, dtype={"date": str})
    except Exception as e:
        raise DataError(f"Failed to read {csv_file.name}: {e}") from e

    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise DataError(f"Missing required columns in {csv_file.name}: {missing_cols}")

    df = df.dropna(subset=["date", "value"])
    df["date"] = df["date"].str.strip()
    df = df.drop_duplicates(subset="date", keep="first").sort_values("date")

    try:
        return [DataPoint(row.date, float(row.value)) for row in df.itertuples(index=False)]
    except (TypeError, ValueError) as e:
        raise DataError(f"Invalid row in {csv_file.name}: {e}") from e

